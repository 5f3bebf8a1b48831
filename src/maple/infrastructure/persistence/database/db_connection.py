"""SQLAlchemy database configuration and connection management.

This module is responsible for:
- Engine creation and configuration
- SQLite connection pragmas
- Session factory creation
"""

from sqlalchemy import Engine, create_engine, event, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from maple.config import get_logger, settings

# Create module logger
logger = get_logger(__name__)


def _is_memory_url(db_url: str) -> bool:
    url = make_url(db_url)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def create_db_engine(
    connection_string: str | None = None, echo: bool | None = None
) -> Engine:
    """Create a SQLAlchemy engine, configured for SQLite when the URL is SQLite.

    In-memory databases share one connection across threads (``StaticPool``)
    so worker-thread reads see the same data as the caller.
    """
    db_url = connection_string or settings.database.url
    echo = settings.database.echo if echo is None else echo

    engine_kwargs: dict = {"echo": echo}
    if db_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_url(db_url):
            engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(db_url, **engine_kwargs)

    if db_url.startswith("sqlite"):
        busy_timeout = settings.database.busy_timeout_ms
        in_memory = _is_memory_url(db_url)

        # Ignoring unused function warning, this is used by SQLAlchemy event system
        @event.listens_for(engine, "connect")  # type: ignore
        def _set_sqlite_pragma(dbapi_connection, _):  # type: ignore # pragma: no cover
            """Set SQLite PRAGMAs on connection creation."""
            cursor = dbapi_connection.cursor()
            cursor.execute(f"PRAGMA busy_timeout = {int(busy_timeout)}")
            if not in_memory:
                cursor.execute("PRAGMA journal_mode = WAL")  # Write-ahead logging
                cursor.execute("PRAGMA synchronous = NORMAL")
            cursor.execute("PRAGMA foreign_keys = ON")  # Enforce foreign keys
            cursor.close()

    logger.debug("Created database engine", url=engine.url.render_as_string())
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory for the given engine.

    Args:
        engine: Engine the sessions bind to

    Returns:
        Session factory for creating properly configured sessions
    """
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,  # Working instances keep reading their records
        autoflush=True,
    )
