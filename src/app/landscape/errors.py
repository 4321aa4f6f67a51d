"""Error taxonomy for landscape installation runs.

All errors raised by the version registry, the state validator and the
installer chain derive from LandscapeError so that callers (the CLI in
particular) can render them uniformly.
"""

from __future__ import annotations


class LandscapeError(Exception):
    """Base class for installation errors.

    Attributes:
        message: Short human-readable description
        details: Optional multi-line explanation or recovery hints
    """

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class VersionNotFoundError(LandscapeError):
    """Raised when a version string matches no registered version band."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Version {version} not found")


class MalformedStateError(LandscapeError):
    """Raised when persisted state does not have the expected structure."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__(
            "Persisted landscape state is malformed",
            details="\n".join(f"  • {p}" for p in problems),
        )


class StateValidationError(LandscapeError):
    """Raised when a band's preconditions are unmet after its corrections."""

    def __init__(self, band: str, reason: str):
        self.band = band
        self.reason = reason
        super().__init__(f"State is not valid for version band {band}: {reason}")


class StateConversionNotSupportedError(LandscapeError):
    """Raised when persisted state would need a structural conversion."""

    def __init__(self, source_version: str, target_version: str):
        self.source_version = source_version
        self.target_version = target_version
        super().__init__(
            f"Converting state from {source_version} to {target_version} "
            "is not supported",
            details=(
                "The persisted state uses a schema that differs from the one "
                "expected by the target version. Migrate the state manually "
                "or install an intermediate version first."
            ),
        )


class RegistryConsistencyError(LandscapeError):
    """Raised when the version registry has overlapping or missing bands."""


class DeploymentError(LandscapeError):
    """Raised when a cluster-affecting deployment operation fails."""


class TaskFailedError(LandscapeError):
    """Raised by the flow executor when a task fails.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, task_name: str, cause: BaseException):
        self.task_name = task_name
        super().__init__(f"Task {task_name} failed: {cause}")
