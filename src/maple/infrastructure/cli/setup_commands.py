"""Setup commands for Maple CLI."""

import typer

from maple.config import get_logger
from maple.infrastructure.cli.ui import command_error_handler, console
from maple.infrastructure.persistence.database.db_models import init_db
from maple.infrastructure.persistence.repositories.factories import open_engine

logger = get_logger(__name__)


def register_setup_commands(app: typer.Typer) -> None:
    """Register setup commands with the Typer app."""
    app.command(
        name="init-db",
        help="Initialize the database schema",
        rich_help_panel="⚙️ System",
    )(initialize_database)


@command_error_handler
def initialize_database() -> None:
    """Initialize the database schema based on current models.

    This command creates database tables that don't yet exist.
    Existing tables are left untouched.
    """
    with console.status("[bold blue]Initializing database schema...") as status:
        with open_engine() as engine:
            tables = init_db(engine)

        status.update("[bold green]Database initialization complete!")
        console.print(
            "\n[bold green]✓ Database schema initialized successfully[/bold green]",
        )
        console.print(f"Tables: [cyan]{', '.join(sorted(tables))}[/cyan]")

        # Show next steps
        console.print("\nNext steps:")
        console.print(
            "  • Run [cyan]maple playlist create TITLE[/cyan] to add a playlist",
        )

        logger.info("Database initialization completed successfully")
