"""Repository factory functions for Clean Architecture compliance.

These factory functions handle engine and session creation while keeping
session management concerns in the infrastructure layer. Callers depend only
on the repository surface, not on SQLAlchemy.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import Engine, make_url
from sqlalchemy.orm import Session

from maple.config import get_logger, settings
from maple.infrastructure.persistence.database.db_connection import (
    create_db_engine,
    create_session_factory,
)
from maple.infrastructure.persistence.database.db_models import init_db
from maple.infrastructure.persistence.repositories.media_repository import (
    MediaRepository,
)
from maple.infrastructure.persistence.unit_of_work import DatabaseUnitOfWork
from maple.infrastructure.services import (
    LoguruNotificationSink,
    SystemClock,
    SystemPrincipalResolver,
)

logger = get_logger(__name__)


def get_unit_of_work(session: Session) -> DatabaseUnitOfWork:
    """Get the store for a session."""
    return DatabaseUnitOfWork(session)


def get_media_repository(
    session: Session,
    *,
    principal: str | None = None,
    on_busy_changed: Callable[[bool], None] | None = None,
) -> MediaRepository:
    """Get a media repository over a session with the system collaborators."""
    return MediaRepository(
        get_unit_of_work(session),
        SystemClock(),
        SystemPrincipalResolver(principal),
        LoguruNotificationSink(),
        on_busy_changed=on_busy_changed,
    )


@contextmanager
def open_engine(database_url: str | None = None) -> Iterator[Engine]:
    """Create an engine for the configured database and dispose it on exit."""
    url = make_url(database_url or settings.database.url)
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(url.render_as_string(hide_password=False))
    try:
        yield engine
    finally:
        engine.dispose()


@contextmanager
def open_media_repository(
    database_url: str | None = None,
    *,
    principal: str | None = None,
    create_schema: bool = True,
) -> Iterator[MediaRepository]:
    """Open a repository on its own engine and session.

    The session, then the engine, are released on exit whatever happens in
    the block.
    """
    with open_engine(database_url) as engine:
        if create_schema:
            init_db(engine)
        session = create_session_factory(engine)()
        repository = get_media_repository(session, principal=principal)
        try:
            yield repository
        finally:
            repository.close()
