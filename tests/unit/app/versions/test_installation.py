"""Unit tests for the installer chain."""

from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from src.app.components.gardener import GardenerTask
from src.app.flow import Flow
from src.app.landscape.errors import MalformedStateError, StateValidationError
from src.app.landscape.models import StateValues
from src.app.utils.semver import compare_main
from src.app.versions import BANDS, ApiserverVersionFloor, InstallationConfig, resolve
from tests.fixtures import make_values


def _installation(version: str, tmp_path: Path, *, dry_run: bool = False):
    storage = AsyncMock()
    installation = resolve(version)(
        storage,
        Mock(),
        Mock(),
        InstallationConfig(gen_dir=tmp_path, dry_run=dry_run),
    )
    return installation, storage


def _flow() -> AsyncMock:
    return AsyncMock(spec=Flow)


class TestMigrationChain:
    """Test the order and content of migration chains."""

    def test_chain_is_newest_first(self):
        steps = BANDS["1.90"].chain()
        assert [step.band for step in steps] == ["1.80", "1.74"]

    def test_band_without_floors_has_empty_chain(self):
        assert BANDS["1.62"].chain() == ()

    def test_floor_steps(self):
        assert BANDS["1.74"].steps == (ApiserverVersionFloor(band="1.74", minimum="v1.22.0"),)
        assert BANDS["1.80"].steps == (ApiserverVersionFloor(band="1.80", minimum="v1.23.16"),)


class TestInstall:
    """Test install() end to end with a mocked deployment."""

    @pytest.mark.asyncio
    async def test_old_apiserver_is_raised_to_floor(self, tmp_path):
        """An upgrade to 1.80.3 lifts a 1.20.0 virtual cluster to v1.23.16."""
        installation, storage = _installation("1.80.3", tmp_path)
        flow = _flow()
        prior = {"version": "v1.74.2", "apiserver": {"version": "1.20.0"}}

        state = await installation.install(flow, prior, make_values(version="1.80.3"))

        assert state.apiserver.version == "v1.23.16"
        assert state.version == "1.80.3"
        assert flow.execute.await_count == 1
        assert isinstance(flow.execute.await_args.args[0], GardenerTask)
        storage.store.assert_awaited_once()
        assert prior == {"version": "v1.74.2", "apiserver": {"version": "1.20.0"}}

    @pytest.mark.asyncio
    async def test_floor_is_applied_before_reconcile(self, tmp_path):
        installation, _ = _installation("1.80.3", tmp_path)
        flow = _flow()
        versions_at_reconcile: list[str | None] = []
        original_reconcile = installation.reconcile

        async def reconcile(flow, state, values):
            versions_at_reconcile.append(state.apiserver.version)
            await original_reconcile(flow, state, values)

        installation.reconcile = reconcile  # type: ignore[method-assign]
        await installation.install(
            flow, {"version": "v1.74.0", "apiserver": {"version": "v1.21.3"}}, make_values()
        )

        assert versions_at_reconcile == ["v1.23.16"]

    @pytest.mark.asyncio
    async def test_newer_apiserver_is_kept(self, tmp_path):
        installation, _ = _installation("1.80.3", tmp_path)
        state = await installation.install(
            _flow(), {"version": "v1.80.0", "apiserver": {"version": "v1.25.4"}}, make_values()
        )
        assert state.apiserver.version == "v1.25.4"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("version", ["1.46.0", "1.62.1", "1.74.0", "1.80.3", "1.95.0"])
    async def test_fresh_state_never_fails(self, tmp_path, version):
        installation, storage = _installation(version, tmp_path)
        values = make_values(version=version)

        state = await installation.install(_flow(), None, values)

        assert state.version == version
        assert state.apiserver.version == values.virtual_cluster.version
        storage.store.assert_awaited_once_with(state, values)

    @pytest.mark.asyncio
    async def test_fresh_install_raises_configured_version_to_floor(self, tmp_path):
        installation, storage = _installation("1.80.3", tmp_path)
        flow = _flow()
        values = make_values(version="1.80.3", virtualCluster={"version": "v1.21.0"})

        state = await installation.install(flow, None, values)

        assert state.apiserver.version == "v1.23.16"
        task = flow.execute.await_args.args[0]
        assert task.virtual_cluster_version == "v1.23.16"
        storage.store.assert_awaited_once_with(state, values)

    @pytest.mark.asyncio
    async def test_fresh_install_below_floors_keeps_configured_version(self, tmp_path):
        installation, _ = _installation("1.62.1", tmp_path)
        values = make_values(version="1.62.1", virtualCluster={"version": "v1.21.0"})

        state = await installation.install(_flow(), None, values)

        assert state.apiserver.version == "v1.21.0"

    @pytest.mark.asyncio
    async def test_upgraded_version_is_handed_to_the_deployment(self, tmp_path):
        installation, _ = _installation("1.80.3", tmp_path)
        flow = _flow()

        await installation.install(
            flow, {"version": "v1.74.2", "apiserver": {"version": "v1.22.4"}}, make_values()
        )

        assert flow.execute.await_args.args[0].virtual_cluster_version == "v1.23.16"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "prior,expected",
        [
            ("v1.20.0-gke.1300", "v1.23.16"),
            ("1.21.5-eks-1", "v1.23.16"),
            ("1.20.0-alpha.beta", "v1.23.16"),
            ("v1.25.4-gke.200", "v1.25.4-gke.200"),
        ],
    )
    async def test_pre_release_apiserver_versions_are_migrated(self, tmp_path, prior, expected):
        installation, storage = _installation("1.80.3", tmp_path)

        state = await installation.install(
            _flow(), {"version": "v1.74.0", "apiserver": {"version": prior}}, make_values()
        )

        assert state.apiserver.version == expected
        storage.store.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target", ["1.73.0", "1.74.5", "1.80.3", "1.91.2"])
    @pytest.mark.parametrize("prior", ["1.19.0", "1.22.0", "1.23.16", "1.27.1"])
    async def test_apiserver_version_never_decreases(self, tmp_path, target, prior):
        installation, _ = _installation(target, tmp_path)
        state = await installation.install(
            _flow(), {"version": "v1.62.0", "apiserver": {"version": prior}}, make_values(version=target)
        )
        assert compare_main(state.apiserver.version, prior) >= 0

    @pytest.mark.asyncio
    async def test_invalid_apiserver_version_fails_before_reconcile(self, tmp_path):
        installation, storage = _installation("1.80.3", tmp_path)
        flow = _flow()

        with pytest.raises(StateValidationError) as excinfo:
            await installation.install(
                flow, {"version": "v1.74.0", "apiserver": {"version": "garbage"}}, make_values()
            )

        assert excinfo.value.band == "1.80"
        flow.execute.assert_not_awaited()
        storage.store.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_state_fails_before_reconcile(self, tmp_path):
        installation, storage = _installation("1.80.3", tmp_path)
        flow = _flow()

        with pytest.raises(MalformedStateError):
            await installation.install(flow, {"apiserver": {"version": "1.20.0"}}, make_values())

        flow.execute.assert_not_awaited()
        storage.store.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dry_run_does_not_store_state(self, tmp_path):
        installation, storage = _installation("1.80.3", tmp_path, dry_run=True)
        flow = _flow()

        await installation.install(flow, None, make_values())

        flow.execute.assert_awaited_once()
        task = flow.execute.await_args.args[0]
        assert task.dry_run is True
        storage.store.assert_not_awaited()


class TestApiserverVersionFloor:
    """Test the floor step in isolation."""

    def test_verify_rejects_older_version(self):
        floor = ApiserverVersionFloor(band="1.80", minimum="v1.23.16")
        with pytest.raises(StateValidationError, match="older than required"):
            floor.verify(StateValues(version="v1.80.0", apiserver={"version": "v1.23.15"}))

    def test_fresh_state_is_left_alone(self):
        floor = ApiserverVersionFloor(band="1.74", minimum="v1.22.0")
        state = StateValues(version="v1.74.0")
        floor.apply(state)
        floor.verify(state)
        assert state.apiserver.version is None

    def test_pre_release_is_compared_on_main_components(self):
        floor = ApiserverVersionFloor(band="1.74", minimum="v1.22.0")
        state = StateValues(version="v1.74.0", apiserver={"version": "v1.22.0-rc.1"})
        floor.apply(state)
        assert state.apiserver.version == "v1.22.0-rc.1"

    @pytest.mark.parametrize("version", ["1.22", "v1.22.0.1", "latest"])
    def test_apply_and_verify_reject_invalid_version(self, version):
        floor = ApiserverVersionFloor(band="1.74", minimum="v1.22.0")
        state = StateValues(version="v1.74.0", apiserver={"version": version})

        for check in (floor.apply, floor.verify):
            with pytest.raises(StateValidationError, match="not a valid version"):
                check(state)
