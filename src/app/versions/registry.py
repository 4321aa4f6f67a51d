"""Version registry and resolver.

Maps target version strings to installer factories through an ordered list
of x-range patterns. The registry checks at construction time that no two
patterns overlap and that the minor bands it declares are contiguous, so a
version can never resolve differently depending on declaration order.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from cachetools.func import lru_cache  # type: ignore
from loguru import logger

from src.app.landscape.errors import (
    RegistryConsistencyError,
    StateConversionNotSupportedError,
    VersionNotFoundError,
)
from src.app.landscape.models import StateValues
from src.app.utils.semver import VersionPattern
from src.app.versions.installation import InstallationFactory
from src.app.versions.migrations import BANDS


@dataclass(frozen=True)
class VersionBand:
    """One registry entry: an x-range pattern and its installer factory."""

    pattern: VersionPattern
    factory: InstallationFactory

    def __str__(self) -> str:
        return f"{self.pattern} -> {self.factory.band.name}"


class VersionRegistry:
    """Ordered, validated mapping from version patterns to installers."""

    def __init__(self, entries: Iterable[tuple[str, InstallationFactory]]) -> None:
        """Build and validate the registry.

        Args:
            entries: (pattern, factory) pairs in declaration order

        Raises:
            RegistryConsistencyError: If patterns are invalid, overlap, or
                leave gaps between the declared minor versions
        """
        bands: list[VersionBand] = []
        for pattern, factory in entries:
            try:
                parsed = VersionPattern.parse(pattern)
            except ValueError as e:
                raise RegistryConsistencyError(str(e)) from e
            bands.append(VersionBand(parsed, factory))
        if not bands:
            raise RegistryConsistencyError("Version registry is empty")

        self._bands: tuple[VersionBand, ...] = tuple(bands)
        self._check_disjoint()
        self._check_coverage()

    # =========================================================================
    # Consistency Checks
    # =========================================================================

    def _check_disjoint(self) -> None:
        for i, left in enumerate(self._bands):
            for right in self._bands[i + 1 :]:
                if left.pattern.overlaps(right.pattern):
                    raise RegistryConsistencyError(
                        f"Version patterns {left.pattern} and {right.pattern} overlap"
                    )

    def _check_coverage(self) -> None:
        """Require contiguous minor versions within each declared major."""
        minors_by_major: dict[int, list[int]] = {}
        for band in self._bands:
            major, minor, patch = band.pattern.fields
            if major is None or minor is None or patch is not None:
                # Only minor-granular bands take part in the coverage check.
                continue
            minors_by_major.setdefault(major, []).append(minor)

        for major, minors in minors_by_major.items():
            expected = set(range(min(minors), max(minors) + 1))
            missing = sorted(expected - set(minors))
            if missing:
                gaps = ", ".join(f"v{major}.{m}.x" for m in missing)
                raise RegistryConsistencyError(
                    f"Version registry does not cover {gaps}"
                )

    # =========================================================================
    # Lookup
    # =========================================================================

    def bands(self) -> Sequence[VersionBand]:
        """All registry entries in declaration order."""
        return self._bands

    def supported_range(self) -> tuple[str, str]:
        """The first and last declared patterns."""
        return (self._bands[0].pattern.raw, self._bands[-1].pattern.raw)

    def find(self, version: str) -> VersionBand:
        """Return the entry whose pattern the version satisfies.

        Raises:
            VersionNotFoundError: If no pattern matches
        """
        for band in self._bands:
            if band.pattern.matches(version):
                return band
        raise VersionNotFoundError(version)

    def resolve(self, version: str) -> InstallationFactory:
        """Return the installer factory for a version.

        Raises:
            VersionNotFoundError: If no pattern matches
        """
        band = self.find(version)
        logger.debug(f"Resolved version {version} via {band}")
        return band.factory


def _default_entries() -> list[tuple[str, InstallationFactory]]:
    factories = {name: InstallationFactory(band) for name, band in BANDS.items()}
    uses = {
        "1.46": ["1.46"],
        "1.47": ["1.47", "1.48", "1.49"],
        "1.50": ["1.50"],
        "1.51": [f"1.{m}" for m in range(51, 62)],
        "1.62": [f"1.{m}" for m in range(62, 74)],
        "1.74": [f"1.{m}" for m in range(74, 80)],
        "1.80": ["1.80"],
        "1.81": [f"1.{m}" for m in range(81, 90)],
        "1.90": [f"1.{m}" for m in range(90, 96)],
    }
    entries: list[tuple[str, InstallationFactory]] = []
    for band_name, minors in uses.items():
        entries.extend((f"v{minor}.x", factories[band_name]) for minor in minors)
    return entries


@lru_cache(maxsize=1)
def get_registry() -> VersionRegistry:
    """The registry of all supported versions, built and validated once."""
    return VersionRegistry(_default_entries())


def resolve(version: str, registry: VersionRegistry | None = None) -> InstallationFactory:
    """Return the installer factory for a version.

    Raises:
        VersionNotFoundError: If the version is not supported
    """
    return (registry or get_registry()).resolve(version)


def convert_state_values(
    state: StateValues,
    target_version: str,
    registry: VersionRegistry | None = None,
) -> StateValues:
    """Make a persisted state usable by the target version's installer.

    Only states whose schema already matches the target band are supported;
    they are returned unchanged. Any structural conversion is rejected.

    Raises:
        VersionNotFoundError: If the state's or the target's version is unknown
        StateConversionNotSupportedError: If the schemas differ
    """
    registry = registry or get_registry()
    source = registry.resolve(state.version)
    target = registry.resolve(target_version)
    if source.state_schema != target.state_schema:
        raise StateConversionNotSupportedError(state.version, target_version)
    return state
