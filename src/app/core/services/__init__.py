"""Core services exports."""

# State Storage
from src.app.core.services.storage import (
    FileStateStorage,
    InMemoryStateStorage,
    StateStorage,
)

__all__ = [
    # State Storage
    "FileStateStorage",
    "InMemoryStateStorage",
    "StateStorage",
]
