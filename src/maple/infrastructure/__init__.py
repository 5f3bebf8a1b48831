"""Infrastructure layer: SQLAlchemy store, system services and the CLI."""
