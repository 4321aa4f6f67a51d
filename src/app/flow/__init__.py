"""Task execution for installation runs."""

from .flow import Flow, Task

__all__ = ["Flow", "Task"]
