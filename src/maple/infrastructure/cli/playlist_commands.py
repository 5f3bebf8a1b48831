"""Playlist commands for Maple CLI."""

from typing import Annotated

import typer

from maple.config import get_logger
from maple.infrastructure.cli.ui import (
    command_error_handler,
    console,
    playlists_table,
)
from maple.infrastructure.persistence.repositories.factories import (
    open_media_repository,
)

logger = get_logger(__name__)

app = typer.Typer(
    help="Create, fill and remove playlists",
    no_args_is_help=True,
)


@app.command(name="list")
@command_error_handler
def list_playlists() -> None:
    """List all playlists with their item counts."""
    with open_media_repository() as repository:
        playlists = repository.get_all_playlists()

    if not playlists:
        console.print("[yellow]No playlists yet.[/yellow]")
        return
    console.print(playlists_table(playlists))


@app.command(name="create")
@command_error_handler
def create_playlist(
    title: Annotated[str, typer.Argument(help="Playlist title")],
    description: Annotated[
        str | None, typer.Option("--description", "-d", help="Playlist description")
    ] = None,
) -> None:
    """Create an empty playlist."""
    with open_media_repository() as repository:
        playlist = repository.new_playlist(
            title, description, siblings=repository.get_all_playlists()
        )
        repository.save(playlist)

    logger.info("Created playlist {}", playlist.id, title=title)
    console.print(
        f"[bold green]✓[/bold green] Created playlist [cyan]{title}[/cyan] "
        f"(id {playlist.id})"
    )


@app.command(name="add-item")
@command_error_handler
def add_item(
    playlist_id: Annotated[int, typer.Argument(help="Target playlist id")],
    title: Annotated[str, typer.Argument(help="Media item title")],
    location: Annotated[str, typer.Argument(help="File path or stream URL")],
    duration_ms: Annotated[
        int | None, typer.Option("--duration-ms", help="Duration in milliseconds")
    ] = None,
) -> None:
    """Append a media item to a playlist."""
    with open_media_repository() as repository:
        playlist = repository.get_playlist_by_id(playlist_id)
        if playlist is None:
            console.print(f"[bold red]✗ Playlist {playlist_id} not found[/bold red]")
            raise typer.Exit(code=1)

        item = repository.new_media_item(
            title, location, playlist=playlist, duration_ms=duration_ms
        )
        repository.save(playlist)

    console.print(
        f"[bold green]✓[/bold green] Added [cyan]{title}[/cyan] to playlist "
        f"{playlist_id} at position {item.sequence}"
    )


@app.command(name="delete")
@command_error_handler
def delete_playlist(
    playlist_id: Annotated[int, typer.Argument(help="Playlist id to delete")],
) -> None:
    """Delete a playlist and its media items."""
    with open_media_repository() as repository:
        playlist = repository.get_playlist_by_id(playlist_id)
        if playlist is None:
            console.print(f"[bold red]✗ Playlist {playlist_id} not found[/bold red]")
            raise typer.Exit(code=1)

        playlist.mark_deleted()
        repository.save(playlist)

    console.print(f"[bold green]✓[/bold green] Deleted playlist {playlist_id}")
