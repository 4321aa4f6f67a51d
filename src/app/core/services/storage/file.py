"""YAML file backed state storage.

The state is written to a temporary file next to the target and then moved
into place, so an interrupted run never leaves a truncated state file. A
snapshot of the reconciled values is written alongside it.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Any

from typing_extensions import override

import yaml  # type: ignore[import-untyped]
from loguru import logger

from src.app.core.services.storage.base import StateStorage, dump_state, dump_values
from src.app.landscape.errors import MalformedStateError
from src.app.landscape.models import LandscapeValues, StateValues


def _write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class FileStateStorage(StateStorage):
    """State storage in a YAML file.

    Attributes:
        state_file: Path of the state file
        values_file: Path of the values snapshot (None to skip the snapshot)
    """

    def __init__(self, state_file: Path, values_file: Path | None = None) -> None:
        self.state_file = Path(state_file)
        self.values_file = Path(values_file) if values_file else None

    @override
    async def load(self) -> dict[str, Any] | None:
        """Load the state file.

        Raises:
            MalformedStateError: If the file is not a YAML mapping
        """
        if not self.state_file.exists():
            logger.debug(f"No state file at {self.state_file}")
            return None

        content = await asyncio.to_thread(self.state_file.read_text)
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise MalformedStateError([f"state file is not valid YAML: {e}"]) from e

        if data is None:
            return None
        if not isinstance(data, dict):
            raise MalformedStateError(
                [f"expected a mapping in {self.state_file}, got {type(data).__name__}"]
            )
        logger.debug(f"Loaded state from {self.state_file}")
        return data

    @override
    async def store(self, state: StateValues, values: LandscapeValues) -> None:
        await asyncio.to_thread(_write_yaml_atomic, self.state_file, dump_state(state))
        if self.values_file is not None:
            await asyncio.to_thread(_write_yaml_atomic, self.values_file, dump_values(values))
        logger.info(f"Stored landscape state at {self.state_file}")

    @override
    async def exists(self) -> bool:
        return self.state_file.exists()

    @override
    def describe(self) -> str:
        return str(self.state_file)
