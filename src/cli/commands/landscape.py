"""Landscape installation commands."""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from src.app.core.services.storage import FileStateStorage
from src.app.landscape.service import install_landscape, landscape_status
from src.app.plugins.helm import HelmClient
from src.app.runtime.config.config_loader import load_values
from src.app.versions import InstallationConfig
from src.cli.context import build_cli_context
from src.cli.shared.console import console, with_error_handling
from src.infra.constants import DEFAULT_CONSTANTS
from src.infra.k8s import Kr8sController, run_sync
from src.infra.k8s.helpers import get_k8s_controller


def _state_storage(state_file: Path | None, gen_dir: Path | None) -> FileStateStorage:
    paths = build_cli_context(gen_dir).paths
    return FileStateStorage(state_file or paths.state_file, paths.values_snapshot)


@with_error_handling
def install(
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            envvar=DEFAULT_CONSTANTS.CONFIG_FILE_ENV,
            help="Landscape file with the desired values",
        ),
    ] = Path(DEFAULT_CONSTANTS.LANDSCAPE_FILE),
    state_file: Annotated[
        Path | None,
        typer.Option(
            "--state-file",
            envvar=DEFAULT_CONSTANTS.STATE_FILE_ENV,
            help="State file (default: <gen-dir>/state.yaml)",
        ),
    ] = None,
    gen_dir: Annotated[
        Path | None,
        typer.Option(
            "--gen-dir",
            envvar=DEFAULT_CONSTANTS.GEN_DIR_ENV,
            help="Directory for rendered values and downloaded charts",
        ),
    ] = None,
    kubeconfig: Annotated[
        Path | None,
        typer.Option(
            "--kubeconfig",
            envvar="LANDSCAPE_KUBECONFIG",
            help="Kubeconfig of the host cluster",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Render values only; no cluster changes, no state update",
        ),
    ] = False,
) -> None:
    """Install or upgrade a Gardener landscape.

    This command:
    - Loads the landscape file and the persisted state
    - Resolves the installer for the target version
    - Applies the state corrections the target version requires
    - Deploys the Gardener control plane via Helm
    - Persists the new state

    Examples:
        landscape-cli install
        landscape-cli install -c landscape.yaml --dry-run
        landscape-cli install --gen-dir /tmp/landscape --state-file state.yaml
    """
    context = build_cli_context(gen_dir)
    context.console.print_header("Installing Gardener Landscape")

    values = load_values(config)
    storage = FileStateStorage(
        state_file or context.paths.state_file, context.paths.values_snapshot
    )
    kube_client = (
        Kr8sController(kubeconfig=str(kubeconfig)) if kubeconfig else get_k8s_controller()
    )
    helm = HelmClient(
        context.helm,
        context.paths,
        dry_run=dry_run,
        host_kubeconfig=kubeconfig,
    )
    installation_config = InstallationConfig(gen_dir=context.paths.gen_dir, dry_run=dry_run)

    with context.console.status(f"Installing landscape {values.landscape_name}..."):
        state = run_sync(
            install_landscape(
                values,
                storage,
                kube_client=kube_client,
                helm=helm,
                config=installation_config,
            )
        )

    if dry_run:
        context.console.ok(
            f"Dry run complete, rendered values in {context.paths.rendered_values_dir}"
        )
        return
    context.console.ok(
        f"Landscape {values.landscape_name} installed at version {state.version} "
        f"(virtual cluster {state.apiserver.version})"
    )


@with_error_handling
def status(
    state_file: Annotated[
        Path | None,
        typer.Option(
            "--state-file",
            envvar=DEFAULT_CONSTANTS.STATE_FILE_ENV,
            help="State file (default: <gen-dir>/state.yaml)",
        ),
    ] = None,
    gen_dir: Annotated[
        Path | None,
        typer.Option(
            "--gen-dir",
            envvar=DEFAULT_CONSTANTS.GEN_DIR_ENV,
            help="Directory for rendered values and downloaded charts",
        ),
    ] = None,
) -> None:
    """Show the persisted state of the landscape.

    Examples:
        landscape-cli status
        landscape-cli status --state-file gen/state.yaml
    """
    console.print_header("Landscape Status")

    result = run_sync(landscape_status(_state_storage(state_file, gen_dir)))
    if result.state is None:
        console.info(f"No landscape state found at {result.location}")
        return

    table = Table(title="Landscape State")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("State file", result.location)
    table.add_row("Version", result.state.version)
    table.add_row("Version band", result.band or "[red]unsupported[/red]")
    table.add_row("Virtual cluster version", result.state.apiserver.version or "-")
    console.print(table)
