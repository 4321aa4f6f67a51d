"""Subprocess execution of the helm binary.

Results are returned as CommandResult and never raised, so callers decide how
a failed release is reported. A missing executable is reported the way a
shell would, with return code 127.
"""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

from loguru import logger

from .types import CommandResult

COMMAND_NOT_FOUND = 127


class CommandRunner:
    """Runs commands from a fixed working directory."""

    def __init__(self, working_dir: Path) -> None:
        self.working_dir = working_dir

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        capture_output: bool = True,
    ) -> CommandResult:
        """Run a command to completion.

        Args:
            cmd: Command and arguments
            cwd: Working directory (defaults to working_dir)
            capture_output: Capture stdout/stderr instead of inheriting them

        Returns:
            CommandResult with the exit status and captured output
        """
        logger.debug(f"Running: {shlex.join(cmd)}")
        try:
            result = subprocess.run(
                list(cmd),
                cwd=cwd or self.working_dir,
                capture_output=capture_output,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            return _not_found(cmd)
        return CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )

    def run_streaming(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Run a command and hand each non-empty output line to on_output.

        stderr is merged into stdout, so the result's stdout holds the whole
        output of a failed release.
        """
        logger.debug(f"Running: {shlex.join(cmd)}")
        try:
            process = subprocess.Popen(
                list(cmd),
                cwd=cwd or self.working_dir,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except FileNotFoundError:
            return _not_found(cmd)

        lines: list[str] = []
        with process:
            for raw in process.stdout or ():
                line = raw.rstrip("\n")
                if not line:
                    continue
                lines.append(line)
                if on_output:
                    on_output(line)

        return CommandResult(
            success=process.returncode == 0,
            stdout="\n".join(lines),
            returncode=process.returncode,
        )


def _not_found(cmd: Sequence[str]) -> CommandResult:
    message = f"{cmd[0]}: command not found"
    logger.error(message)
    return CommandResult(success=False, stderr=message, returncode=COMMAND_NOT_FOUND)
