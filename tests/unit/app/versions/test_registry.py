"""Unit tests for the version registry and resolver."""

from unittest.mock import Mock

import pytest

from src.app.landscape.errors import (
    RegistryConsistencyError,
    StateConversionNotSupportedError,
    VersionNotFoundError,
)
from src.app.landscape.models import StateValues
from src.app.versions import (
    BANDS,
    Band,
    InstallationFactory,
    VersionRegistry,
    convert_state_values,
    get_registry,
    resolve,
)

EXPECTED_BANDS = {
    46: "1.46",
    47: "1.47", 48: "1.47", 49: "1.47",
    50: "1.50",
    **{minor: "1.51" for minor in range(51, 62)},
    **{minor: "1.62" for minor in range(62, 74)},
    **{minor: "1.74" for minor in range(74, 80)},
    80: "1.80",
    **{minor: "1.81" for minor in range(81, 90)},
    **{minor: "1.90" for minor in range(90, 96)},
}


def _factory(name: str, schema: str = "v1.46") -> InstallationFactory:
    return InstallationFactory(Band(name=name, state_schema=schema))


class TestDefaultRegistry:
    """Test the built-in registry."""

    @pytest.mark.parametrize("minor,band", sorted(EXPECTED_BANDS.items()))
    def test_every_declared_minor_resolves(self, minor, band):
        assert resolve(f"1.{minor}.0").band.name == band
        assert resolve(f"v1.{minor}.7").band.name == band

    def test_patterns_are_pairwise_disjoint(self):
        bands = get_registry().bands()
        for i, left in enumerate(bands):
            for right in bands[i + 1 :]:
                assert not left.pattern.overlaps(right.pattern)

    def test_supported_range(self):
        assert get_registry().supported_range() == ("v1.46.x", "v1.95.x")

    def test_registry_is_built_once(self):
        assert get_registry() is get_registry()

    @pytest.mark.parametrize("version", ["1.96.0", "1.45.9", "2.0.0", "0.46.0"])
    def test_unsupported_version_raises(self, version):
        with pytest.raises(VersionNotFoundError) as excinfo:
            resolve(version)

        assert excinfo.value.version == version
        assert version in str(excinfo.value)

    def test_pre_release_is_not_resolved(self):
        with pytest.raises(VersionNotFoundError):
            resolve("1.80.0-dev")

    @pytest.mark.parametrize(
        "version", ["v1.eighty", "1.80", "v1.80", "1.80.3.1", "1.80.03", "1!1.80.3"]
    )
    def test_malformed_version_raises(self, version):
        with pytest.raises(VersionNotFoundError):
            resolve(version)


class TestRegistryConsistency:
    """Test validation at registry construction."""

    def test_overlapping_patterns_are_rejected(self):
        with pytest.raises(RegistryConsistencyError, match="overlap"):
            VersionRegistry([("v1.80.x", _factory("a")), ("1.x", _factory("b"))])

    def test_gap_is_rejected(self):
        with pytest.raises(RegistryConsistencyError, match="v1.81.x"):
            VersionRegistry([("v1.80.x", _factory("a")), ("v1.82.x", _factory("b"))])

    def test_invalid_pattern_is_rejected(self):
        with pytest.raises(RegistryConsistencyError):
            VersionRegistry([("v1.x.1", _factory("a"))])

    def test_empty_registry_is_rejected(self):
        with pytest.raises(RegistryConsistencyError):
            VersionRegistry([])

    def test_custom_registry_resolves(self):
        factory = _factory("custom")
        registry = VersionRegistry([("v2.0.x", factory), ("v2.1.x", _factory("next"))])
        assert resolve("2.0.4", registry=registry) is factory


class TestConvertStateValues:
    """Test the state conversion hook."""

    def test_same_schema_returns_state_unchanged(self):
        state = StateValues(version="v1.62.0", apiserver={"version": "v1.21.0"})
        assert convert_state_values(state, "v1.90.0") is state

    def test_unknown_state_version_raises(self):
        state = StateValues(version="v1.20.0")
        with pytest.raises(VersionNotFoundError):
            convert_state_values(state, "v1.80.0")

    def test_different_schema_is_not_supported(self):
        registry = VersionRegistry(
            [("v1.0.x", _factory("old", "v0")), ("v1.1.x", _factory("new", "v1"))]
        )
        state = StateValues(version="1.0.3")

        with pytest.raises(StateConversionNotSupportedError) as excinfo:
            convert_state_values(state, "1.1.0", registry=registry)

        assert excinfo.value.source_version == "1.0.3"
        assert excinfo.value.target_version == "1.1.0"


def test_all_bands_share_the_state_schema():
    assert {band.state_schema for band in BANDS.values()} == {"v1.46"}


def test_factory_builds_installation_for_its_band():
    factory = resolve("v1.80.1")
    installation = factory(Mock(), Mock(), Mock(), Mock())
    assert installation.band is BANDS["1.80"]
