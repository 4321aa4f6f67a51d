"""Landscape state storage backends."""

from .base import StateStorage
from .file import FileStateStorage
from .memory import InMemoryStateStorage

__all__ = ["StateStorage", "FileStateStorage", "InMemoryStateStorage"]
