"""Landscape state storage interface.

The installer persists the reconciled state (and a snapshot of the values it
was reconciled with) through a StateStorage. The next run loads the state
back and hands it to the state validator.
"""

from abc import ABC, abstractmethod
from typing import Any

from src.app.landscape.models import LandscapeValues, StateValues


class StateStorage(ABC):
    """Abstract interface for landscape state backends."""

    @abstractmethod
    async def load(self) -> dict[str, Any] | None:
        """Load the persisted state.

        Returns:
            The raw state as stored, or None if nothing was stored yet
        """
        pass

    @abstractmethod
    async def store(self, state: StateValues, values: LandscapeValues) -> None:
        """Persist the reconciled state.

        Args:
            state: State after a successful reconciliation
            values: Values the landscape was reconciled with
        """
        pass

    @abstractmethod
    async def exists(self) -> bool:
        """Check if a state was stored.

        Returns:
            True if load() would return a state
        """
        pass

    @abstractmethod
    def describe(self) -> str:
        """Human readable location of the state, used in CLI output."""
        pass


def dump_state(state: StateValues) -> dict[str, Any]:
    """Serialize a state the way it is persisted."""
    return state.model_dump(mode="json")


def dump_values(values: LandscapeValues) -> dict[str, Any]:
    """Serialize values with their landscape file field names."""
    return values.model_dump(mode="json", by_alias=True)
