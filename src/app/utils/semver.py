"""Semantic version helpers.

Versions follow SemVer 2.0 (``MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]``) and
may carry a leading ``v``. Anything else, such as ``1.80``, ``1.80.3.1`` or
``1.80.03``, is rejected. Only the main components take part in comparisons;
pre-release and build metadata are ignored there, matching semver's
``compareMain``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

WILDCARDS = frozenset({"x", "X", "*"})

_NUMERIC = r"0|[1-9]\d*"
_PRERELEASE_ID = rf"(?:{_NUMERIC}|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
SEMVER_PATTERN = re.compile(
    rf"^v?(?P<major>{_NUMERIC})\.(?P<minor>{_NUMERIC})\.(?P<patch>{_NUMERIC})"
    rf"(?:-(?P<prerelease>{_PRERELEASE_ID}(?:\.{_PRERELEASE_ID})*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


class InvalidVersionError(ValueError):
    """Raised when a string is not a semantic version."""

    def __init__(self, version: str) -> None:
        super().__init__(f"Invalid semantic version: {version!r}")
        self.version = version


@dataclass(frozen=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    @property
    def main(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None


def parse_version(version: str) -> SemVer:
    """Parse a semantic version string.

    Raises:
        InvalidVersionError: If the string is not a valid semantic version
    """
    match = SEMVER_PATTERN.match(version.strip())
    if match is None:
        raise InvalidVersionError(version)
    return SemVer(
        major=int(match["major"]),
        minor=int(match["minor"]),
        patch=int(match["patch"]),
        prerelease=match["prerelease"],
        build=match["build"],
    )


def main_components(version: str | SemVer) -> tuple[int, int, int]:
    """Return (major, minor, patch) of a version."""
    parsed = version if isinstance(version, SemVer) else parse_version(version)
    return parsed.main


def compare_main(a: str | SemVer, b: str | SemVer) -> int:
    """Compare two versions on their main components.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b

    Raises:
        InvalidVersionError: If either version is not a semantic version
    """
    left, right = main_components(a), main_components(b)
    return (left > right) - (left < right)


@dataclass(frozen=True)
class VersionPattern:
    """An x-range such as ``v1.74.x``.

    A component of None is a wildcard. Once a component is a wildcard all
    following components are wildcards as well.
    """

    raw: str
    major: int | None
    minor: int | None
    patch: int | None

    @classmethod
    def parse(cls, pattern: str) -> VersionPattern:
        """Parse an x-range pattern.

        Raises:
            ValueError: If the pattern is not a valid x-range
        """
        text = pattern.strip()
        if text[:1] in ("v", "V"):
            text = text[1:]
        parts = text.split(".")
        if not 1 <= len(parts) <= 3:
            raise ValueError(f"Invalid version pattern: {pattern!r}")

        components: list[int | None] = []
        wildcard_seen = False
        for part in parts:
            if part in WILDCARDS:
                wildcard_seen = True
                components.append(None)
                continue
            if wildcard_seen or not part.isdigit():
                raise ValueError(f"Invalid version pattern: {pattern!r}")
            components.append(int(part))
        components.extend([None] * (3 - len(components)))
        return cls(pattern, components[0], components[1], components[2])

    @property
    def fields(self) -> tuple[int | None, int | None, int | None]:
        return (self.major, self.minor, self.patch)

    def matches(self, version: str) -> bool:
        """Whether a version string satisfies this range.

        Pre-releases never satisfy an x-range and strings that are not
        semantic versions never match.
        """
        try:
            parsed = parse_version(version)
        except InvalidVersionError:
            return False
        if parsed.is_prerelease:
            return False
        return all(
            expected is None or expected == actual
            for expected, actual in zip(self.fields, parsed.main)
        )

    def overlaps(self, other: VersionPattern) -> bool:
        """Whether some version satisfies both patterns."""
        return all(
            a is None or b is None or a == b
            for a, b in zip(self.fields, other.fields)
        )

    def __str__(self) -> str:
        return self.raw
