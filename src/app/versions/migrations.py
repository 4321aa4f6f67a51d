"""Per-band state corrections.

Every supported version band owns a (possibly empty) tuple of migration
steps. Installing a band applies its own steps and then those of every older
band, newest first, before the single terminal reconciliation runs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from loguru import logger

from src.app.landscape.errors import StateValidationError
from src.app.landscape.models import StateValues
from src.app.utils.semver import InvalidVersionError, compare_main

# Schema identifier of StateValues; all current bands share it.
STATE_SCHEMA_V1_46 = "v1.46"


class MigrationStep(ABC):
    """A state correction bound to one version band."""

    band: str

    @abstractmethod
    def apply(self, state: StateValues) -> None:
        """Mutate the state so it satisfies this band's requirements."""
        ...

    @abstractmethod
    def verify(self, state: StateValues) -> None:
        """Check the corrected state.

        Raises:
            StateValidationError: If the state is still unfit for this band
        """
        ...


@dataclass(frozen=True)
class ApiserverVersionFloor(MigrationStep):
    """Enforce a minimum virtual cluster (kube-apiserver) version.

    A state without a recorded apiserver version satisfies the floor as-is.
    Pre-release and build metadata of the recorded version are ignored.
    """

    band: str
    minimum: str

    def __str__(self) -> str:
        return f"apiserver >= {self.minimum} ({self.band})"

    def _compare(self, current: str) -> int:
        try:
            return compare_main(current, self.minimum)
        except InvalidVersionError as e:
            raise StateValidationError(
                self.band, f"apiserver version {current!r} is not a valid version"
            ) from e

    def apply(self, state: StateValues) -> None:
        current = state.apiserver.version
        if current is not None and self._compare(current) < 0:
            logger.info(
                f"Raising virtual cluster version from {current} to {self.minimum} "
                f"as required by version {self.band}"
            )
            state.apiserver.version = self.minimum

    def verify(self, state: StateValues) -> None:
        current = state.apiserver.version
        if current is not None and self._compare(current) < 0:
            raise StateValidationError(
                self.band,
                f"apiserver version {current} is older than required {self.minimum}",
            )


@dataclass(frozen=True)
class Band:
    """A version band with its own state corrections."""

    name: str
    steps: tuple[MigrationStep, ...] = ()
    state_schema: str = STATE_SCHEMA_V1_46
    bands_below: tuple[Band, ...] = field(default=(), repr=False)

    def chain(self) -> tuple[MigrationStep, ...]:
        """Steps of this band followed by those of every older band."""
        steps = list(self.steps)
        for older in self.bands_below:
            steps.extend(older.steps)
        return tuple(steps)


def _build_bands(*definitions: tuple[str, tuple[MigrationStep, ...]]) -> dict[str, Band]:
    """Link band definitions (oldest first) to the bands below them."""
    bands: dict[str, Band] = {}
    below: list[Band] = []
    for name, steps in definitions:
        band = Band(name=name, steps=steps, bands_below=tuple(reversed(below)))
        bands[name] = band
        below.append(band)
    return bands


BANDS = _build_bands(
    ("1.46", ()),
    ("1.47", ()),
    ("1.50", ()),
    ("1.51", ()),
    ("1.62", ()),
    # gardener 1.74 requires host and virtual cluster running at least 1.22
    ("1.74", (ApiserverVersionFloor(band="1.74", minimum="v1.22.0"),)),
    ("1.80", (ApiserverVersionFloor(band="1.80", minimum="v1.23.16"),)),
    ("1.81", ()),
    ("1.90", ()),
)
