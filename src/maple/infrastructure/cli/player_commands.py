"""Media player commands for Maple CLI."""

import typer

from maple.infrastructure.cli.ui import command_error_handler, console, players_table
from maple.infrastructure.persistence.repositories.factories import (
    open_media_repository,
)


def register_player_commands(app: typer.Typer) -> None:
    """Register media player commands with the Typer app."""
    app.command(
        name="players",
        help="Show the main and optional media players",
        rich_help_panel="🎵 Playback",
    )(show_players)


@command_error_handler
def show_players() -> None:
    """Show the main media player followed by the optional ones."""
    with open_media_repository() as repository:
        main = repository.get_main_media_player()
        optional = repository.get_all_optional_media_players()

    if main is None and not optional:
        console.print("[yellow]No media players configured.[/yellow]")
        return
    console.print(players_table(main, optional))
