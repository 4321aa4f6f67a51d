"""In-memory state storage, used for dry runs and tests."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from typing_extensions import override

from src.app.core.services.storage.base import StateStorage, dump_state, dump_values
from src.app.landscape.models import LandscapeValues, StateValues


class InMemoryStateStorage(StateStorage):
    """State storage kept in process memory."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._state: dict[str, Any] | None = deepcopy(initial)
        self._values: dict[str, Any] | None = None

    @override
    async def load(self) -> dict[str, Any] | None:
        return deepcopy(self._state)

    @override
    async def store(self, state: StateValues, values: LandscapeValues) -> None:
        self._state = dump_state(state)
        self._values = dump_values(values)

    @override
    async def exists(self) -> bool:
        return self._state is not None

    @override
    def describe(self) -> str:
        return "memory"

    @property
    def values(self) -> dict[str, Any] | None:
        """Snapshot of the values passed to the last store()."""
        return deepcopy(self._values)
