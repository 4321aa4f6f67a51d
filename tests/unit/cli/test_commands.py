"""Tests for the landscape CLI commands."""

from unittest.mock import AsyncMock, patch

import yaml
from typer.testing import CliRunner

from src.cli import app
from src.infra.k8s import Kr8sController

runner = CliRunner()


def _write_landscape(tmp_path, raw_values, version="v1.80.3"):
    raw_values["version"] = version
    path = tmp_path / "landscape.yaml"
    path.write_text(yaml.safe_dump({"landscape": raw_values}))
    return path


class TestVersionCommands:
    """Test registry inspection commands."""

    def test_versions_lists_bands(self):
        result = runner.invoke(app, ["versions"])

        assert result.exit_code == 0
        assert "v1.46.x" in result.output
        assert "v1.95.x" in result.output

    def test_resolve_known_version(self):
        result = runner.invoke(app, ["resolve", "v1.80.3"])

        assert result.exit_code == 0
        assert "1.80" in result.output

    def test_resolve_unknown_version(self):
        result = runner.invoke(app, ["resolve", "1.96.0"])

        assert result.exit_code == 1
        assert "Version 1.96.0 not found" in result.output


class TestInstallCommand:
    """Test the install command."""

    def test_dry_run_renders_values_without_state(self, tmp_path, raw_values):
        config = _write_landscape(tmp_path, raw_values)
        gen_dir = tmp_path / "gen"

        with patch("src.cli.commands.landscape.get_k8s_controller") as get_controller:
            result = runner.invoke(
                app,
                ["install", "--config", str(config), "--gen-dir", str(gen_dir), "--dry-run"],
            )

        assert result.exit_code == 0, result.output
        get_controller.assert_called_once()
        assert (gen_dir / "values" / "gardener-application.yaml").exists()
        assert (gen_dir / "values" / "gardener-runtime.yaml").exists()
        assert not (gen_dir / "state.yaml").exists()

    def test_install_persists_state(self, tmp_path, raw_values):
        config = _write_landscape(tmp_path, raw_values)
        state_file = tmp_path / "state.yaml"
        state_file.write_text(
            yaml.safe_dump({"version": "v1.74.0", "apiserver": {"version": "v1.20.0"}})
        )

        with (
            patch("src.cli.commands.landscape.get_k8s_controller"),
            patch(
                "src.app.components.gardener.GardenerTask.do", new=AsyncMock(return_value=None)
            ),
        ):
            result = runner.invoke(
                app,
                [
                    "install",
                    "--config",
                    str(config),
                    "--state-file",
                    str(state_file),
                    "--gen-dir",
                    str(tmp_path / "gen"),
                ],
            )

        assert result.exit_code == 0, result.output
        assert yaml.safe_load(state_file.read_text()) == {
            "version": "v1.80.3",
            "apiserver": {"version": "v1.23.16"},
        }
        assert (tmp_path / "gen" / "values.yaml").exists()

    def test_kubeconfig_option_builds_controller(self, tmp_path, raw_values):
        config = _write_landscape(tmp_path, raw_values)
        with patch("src.cli.commands.landscape.install_landscape", new=AsyncMock()) as install:
            result = runner.invoke(
                app,
                [
                    "install",
                    "--config",
                    str(config),
                    "--gen-dir",
                    str(tmp_path / "gen"),
                    "--kubeconfig",
                    "/tmp/host.kubeconfig",
                ],
            )

        assert result.exit_code == 0, result.output
        kube_client = install.await_args.kwargs["kube_client"]
        assert isinstance(kube_client, Kr8sController)
        assert kube_client.kubeconfig == "/tmp/host.kubeconfig"

    def test_malformed_state_fails(self, tmp_path, raw_values):
        config = _write_landscape(tmp_path, raw_values)
        state_file = tmp_path / "state.yaml"
        state_file.write_text(yaml.safe_dump({"apiserver": {"version": "v1.20.0"}}))

        with patch("src.cli.commands.landscape.get_k8s_controller"):
            result = runner.invoke(
                app,
                ["install", "--config", str(config), "--state-file", str(state_file)],
            )

        assert result.exit_code == 1
        assert "malformed" in result.output

    def test_missing_config_fails(self, tmp_path):
        result = runner.invoke(app, ["install", "--config", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1


class TestStatusCommand:
    """Test the status command."""

    def test_no_state(self, tmp_path):
        result = runner.invoke(app, ["status", "--state-file", str(tmp_path / "state.yaml")])

        assert result.exit_code == 0
        assert "No landscape state found" in result.output

    def test_shows_state(self, tmp_path):
        state_file = tmp_path / "state.yaml"
        state_file.write_text(
            yaml.safe_dump({"version": "v1.80.3", "apiserver": {"version": "v1.23.16"}})
        )

        result = runner.invoke(app, ["status", "--state-file", str(state_file)])

        assert result.exit_code == 0
        assert "v1.23.16" in result.output
        assert "1.80" in result.output
