"""Maple CLI - Main application entry point and app structure."""

from importlib.metadata import PackageNotFoundError, version
from typing import Annotated

from rich.console import Console
import typer

from maple.config import get_logger, log_startup_info, setup_loguru_logger
from maple.infrastructure.cli import playlist_commands
from maple.infrastructure.cli.player_commands import register_player_commands
from maple.infrastructure.cli.setup_commands import register_setup_commands

try:
    VERSION = version("maple")
except PackageNotFoundError:
    # Running from a source checkout
    VERSION = "0.0.0"

# Initialize console and logger with reasonable width
console = Console(width=80)
logger = get_logger(__name__)

# Initialize main app with modern configuration
app = typer.Typer(
    help=f"🍁 Maple v{VERSION} - Playlists, media players and audio devices",
    no_args_is_help=True,  # Show help when no command provided
    rich_markup_mode="rich",
    add_completion=False,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
)

app.add_typer(
    playlist_commands.app,
    name="playlist",
    help="Create and manage playlists",
    rich_help_panel="🎵 Playlists",
)

# Register individual utility commands
register_player_commands(app)
register_setup_commands(app)


@app.command(name="version", rich_help_panel="⚙️ System")
def version_command() -> None:
    """Show version information."""
    console.print(f"[bold bright_blue]🍁 Maple[/bold bright_blue] [dim]v{VERSION}[/dim]")


@app.callback()
def init_cli(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Initialize Maple CLI."""
    # Store verbosity in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    # Setup logging first
    setup_loguru_logger(verbose)
    log_startup_info()


def main() -> int:
    """Application entry point."""
    try:
        # Let Typer handle command execution
        return app() or 0
    except Exception:
        logger.exception("Unhandled exception")
        return 1
