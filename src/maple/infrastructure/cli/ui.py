"""UI helpers for CLI interaction.

This module provides reusable UI components and helpers for the CLI,
keeping the presentation logic separate from persistence logic.
"""

from collections.abc import Callable, Iterable
from datetime import datetime
import functools
from typing import ParamSpec, TypeVar

from rich.console import Console
from rich.table import Table
import typer

from maple.config import get_logger
from maple.domain.entities import MediaPlayer, Playlist

P = ParamSpec("P")
R = TypeVar("R")

# Initialize console and logger
console = Console()
logger = get_logger(__name__)


def command_error_handler(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to standardize error handling for CLI commands.

    This decorator wraps a command function to:
    1. Provide consistent error handling using Typer's Exit mechanism
    2. Log errors using Loguru with proper context
    3. Display user-friendly error messages with Rich

    Args:
        func: The command function to wrap

    Returns:
        Wrapped function with integrated error handling
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        # Get operation name from function name for logging context
        operation = func.__name__.replace("_", " ")

        # Execute with logging context
        with logger.contextualize(operation=operation):
            try:
                logger.debug("Executing {}", operation)
                return func(*args, **kwargs)

            except typer.Exit:
                # Let typer.Exit propagate to Typer - it's already being handled
                raise

            except typer.Abort:
                # User initiated abort (e.g., Ctrl+C), log and re-raise
                logger.info("Operation {} aborted by user", operation)
                raise

            except Exception as e:
                display_error(e, operation)

                # Convert to Typer exit for proper exit code
                raise typer.Exit(code=1) from e

    return wrapper


def display_error(error: Exception, operation: str) -> None:
    """Display error message with consistent formatting.

    Args:
        error: The exception that occurred
        operation: Description of the operation that failed
    """
    console.print(f"\n[bold red]✗ Error during {operation}:[/bold red] {error}")
    logger.opt(exception=error).error("Error during {}", operation)


def format_timestamp(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


def playlists_table(playlists: Iterable[Playlist]) -> Table:
    """Build a table of playlists with item counts and audit columns."""
    table = Table(title="Playlists", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Seq", justify="right")
    table.add_column("Title", style="green")
    table.add_column("Items", justify="right")
    table.add_column("Created", style="dim")
    table.add_column("Updated", style="dim")

    for playlist in playlists:
        table.add_row(
            str(playlist.id),
            str(playlist.sequence),
            playlist.title or "",
            str(len(playlist.items)),
            f"{playlist.created_by} {format_timestamp(playlist.created_on)}",
            (
                f"{playlist.updated_by} {format_timestamp(playlist.updated_on)}"
                if playlist.updated_by
                else "-"
            ),
        )
    return table


def players_table(main: MediaPlayer | None, optional: Iterable[MediaPlayer]) -> Table:
    """Build a table of media players, primary first."""
    table = Table(title="Media Players", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name", style="green")
    table.add_column("Role")
    table.add_column("Playlist")

    players = ([main] if main is not None else []) + list(optional)
    for player in players:
        table.add_row(
            str(player.id),
            player.name or "",
            "[bold]main[/bold]" if player.is_primary else "optional",
            player.playlist.title if player.playlist is not None else "-",
        )
    return table
