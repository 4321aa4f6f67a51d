"""Data types for shell command results."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "CommandResult",
]


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0
