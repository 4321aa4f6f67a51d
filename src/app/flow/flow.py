"""Minimal task executor used by installers.

A Flow runs named units of work (tasks) either one after another or
concurrently. Failures are wrapped into TaskFailedError so callers can tell
which task broke, while the original exception stays available as the cause.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod

from loguru import logger

from src.app.landscape.errors import TaskFailedError


class Task(ABC):
    """A named unit of deployment work."""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    async def do(self) -> None:
        """Perform the work of this task."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class Flow:
    """Executes tasks and records which of them completed.

    Attributes:
        dry_run: When True, tasks must skip cluster-mutating calls
        completed: Names of tasks that finished successfully, in order
    """

    def __init__(self, *, dry_run: bool = False) -> None:
        self.dry_run = dry_run
        self.completed: list[str] = []

    async def execute(self, *tasks: Task) -> None:
        """Run tasks sequentially, stopping at the first failure.

        Raises:
            TaskFailedError: If a task raises
        """
        for task in tasks:
            await self._run(task)

    async def execute_parallel(self, *tasks: Task) -> None:
        """Run tasks concurrently.

        The first failure cancels the tasks still running and is raised once
        they have been cancelled.

        Raises:
            TaskFailedError: If any task raises
        """
        try:
            async with asyncio.TaskGroup() as group:
                for task in tasks:
                    group.create_task(self._run(task))
        except ExceptionGroup as errors:
            failures = [e for e in errors.exceptions if isinstance(e, TaskFailedError)]
            if not failures:
                raise
            raise failures[0] from failures[0].__cause__

    async def _run(self, task: Task) -> None:
        mode = " (dry run)" if self.dry_run else ""
        logger.info(f"Starting task {task.name}{mode}")
        start = time.perf_counter()
        try:
            await task.do()
        except TaskFailedError:
            raise
        except Exception as e:
            logger.error(f"Task {task.name} failed: {e}")
            raise TaskFailedError(task.name, e) from e
        elapsed = time.perf_counter() - start
        self.completed.append(task.name)
        logger.info(f"Finished task {task.name} in {elapsed:.1f}s")
