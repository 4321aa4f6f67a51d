"""Unit tests for semver helpers."""

import pytest

from src.app.utils.semver import (
    InvalidVersionError,
    VersionPattern,
    compare_main,
    main_components,
    parse_version,
)


class TestParseVersion:
    """Test the SemVer 2.0 grammar."""

    def test_full_version(self):
        parsed = parse_version("v1.21.5-eks.1+build.7")
        assert parsed.main == (1, 21, 5)
        assert parsed.prerelease == "eks.1"
        assert parsed.build == "build.7"

    @pytest.mark.parametrize(
        "version", ["v1.20.0-gke.1300", "1.21.5-eks-1", "1.20.0-alpha.beta", "1.0.0-0.3.7"]
    )
    def test_pre_release_identifiers(self, version):
        assert parse_version(version).is_prerelease

    @pytest.mark.parametrize(
        "version",
        ["1.80", "1.80.3.1", "1.80.03", "1!1.80.3", "01.80.3", "1.80.3-01", "1.80.3-", "latest", ""],
    )
    def test_rejects_non_semver(self, version):
        with pytest.raises(InvalidVersionError):
            parse_version(version)


class TestCompareMain:
    """Test main-component comparison."""

    def test_leading_v_is_ignored(self):
        assert compare_main("v1.23.16", "1.23.16") == 0

    def test_orders_by_major_minor_patch(self):
        assert compare_main("1.20.0", "v1.23.16") == -1
        assert compare_main("1.24.0", "v1.23.16") == 1
        assert compare_main("1.23.17", "1.23.16") == 1

    @pytest.mark.parametrize(
        "version", ["v1.23.16-rc.1", "v1.23.16-gke.1300", "1.23.16+build.5"]
    )
    def test_pre_release_and_build_are_ignored(self, version):
        """Pre-release and build segments do not take part in the comparison."""
        assert compare_main(version, "1.23.16") == 0

    def test_main_components(self):
        assert main_components("v1.22.4-eks-1") == (1, 22, 4)

    def test_invalid_version_raises(self):
        with pytest.raises(InvalidVersionError):
            compare_main("1.22", "1.0.0")


class TestVersionPattern:
    """Test x-range patterns."""

    def test_parse_minor_band(self):
        pattern = VersionPattern.parse("v1.74.x")
        assert pattern.fields == (1, 74, None)
        assert str(pattern) == "v1.74.x"

    @pytest.mark.parametrize("raw", ["1.*", "1.X", "v1"])
    def test_wildcard_spellings(self, raw):
        assert VersionPattern.parse(raw).fields == (1, None, None)

    @pytest.mark.parametrize("raw", ["", "1.x.3", "v1.a.x", "1.2.3.4"])
    def test_invalid_patterns(self, raw):
        with pytest.raises(ValueError):
            VersionPattern.parse(raw)

    def test_matches_release_versions(self):
        pattern = VersionPattern.parse("v1.80.x")
        assert pattern.matches("1.80.0")
        assert pattern.matches("v1.80.3")
        assert not pattern.matches("1.81.0")

    def test_pre_release_does_not_match(self):
        assert not VersionPattern.parse("v1.80.x").matches("1.80.0-dev")

    def test_build_metadata_is_ignored(self):
        assert VersionPattern.parse("v1.80.x").matches("1.80.3+build.5")

    def test_unparseable_version_does_not_match(self):
        assert not VersionPattern.parse("v1.80.x").matches("latest")

    def test_overlaps(self):
        band = VersionPattern.parse("v1.80.x")
        assert band.overlaps(VersionPattern.parse("1.x"))
        assert band.overlaps(VersionPattern.parse("v1.80.2"))
        assert not band.overlaps(VersionPattern.parse("v1.81.x"))


@pytest.mark.parametrize("version", ["1.80", "1.80.3.1", "1.80.03", "1!1.80.3", "v1.80"])
def test_malformed_versions_never_match(version):
    assert not VersionPattern.parse("v1.80.x").matches(version)
