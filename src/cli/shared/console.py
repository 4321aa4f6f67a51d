"""Console output and error handling of the landscape CLI.

Progress and results go to a rich console. Failures of an installation run
end up as a red summary line with a details panel and a non-zero exit code.
"""

from collections.abc import Callable
from functools import wraps

import typer
from loguru import logger
from rich.console import Console, ConsoleRenderable
from rich.panel import Panel
from rich.status import Status

from src.app.landscape.errors import LandscapeError

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class CLIConsole:
    """Rich console used by the landscape commands."""

    def __init__(self) -> None:
        self.console = Console()

    def print(self, msg: ConsoleRenderable | str | None = None) -> None:
        self.console.print(msg)

    def status(self, status: str) -> Status:
        return self.console.status(status)

    def info(self, msg: str) -> None:
        self.console.print(f"[cyan]ℹ[/cyan]  {msg}")

    def ok(self, msg: str) -> None:
        self.console.print(f"[green]✅[/green] {msg}")

    def error(self, msg: str) -> None:
        self.console.print(f"[red]❌[/red] {msg}")

    def print_header(self, title: str, style: str = "blue") -> None:
        self.console.print(
            Panel.fit(f"[bold {style}]{title}[/bold {style}]", border_style=style)
        )

    def handle_error(
        self, message: str, details: str | None = None, exit_code: int = EXIT_FAILURE
    ) -> None:
        """Print an error summary, optionally with a details panel, and exit.

        Raises:
            typer.Exit: Always, with the given exit code
        """
        self.error(f"[bold red]{message}[/bold red]")
        if details:
            self.console.print(Panel(details, title="Details", border_style="red"))
        raise typer.Exit(exit_code)

    def handle_landscape_error(self, error: LandscapeError) -> None:
        """Render an installation error and exit.

        Errors without details of their own (a failed task, for instance)
        show the exception that caused them instead.
        """
        details = error.details
        cause = error.__cause__
        if not details and cause is not None:
            details = f"{type(cause).__name__}: {cause}"
        logger.debug(f"{type(error).__name__}: {error.message}")
        self.handle_error(error.message, details)


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Turn installation and configuration errors of a command into exit codes.

    LandscapeError, ValueError and FileNotFoundError exit with 1, Ctrl-C
    with 130.
    """

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except LandscapeError as e:
            console.handle_landscape_error(e)
        except (ValueError, FileNotFoundError) as e:
            console.handle_error("Invalid configuration", str(e))
        except KeyboardInterrupt:
            console.print("\n[dim]Installation cancelled by user.[/dim]")
            raise typer.Exit(EXIT_INTERRUPTED) from None

    return wrapper


console = CLIConsole()
