import pytest

from maple.infrastructure.persistence.database.db_connection import (
    create_db_engine,
    create_session_factory,
)
from maple.infrastructure.persistence.database.db_models import init_db
from maple.infrastructure.persistence.repositories.media_repository import (
    MediaRepository,
)
from maple.infrastructure.persistence.unit_of_work import DatabaseUnitOfWork
from tests.fixtures.models import FakeStore, FixedClock, FixedPrincipal, RecordingSink


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def principal():
    return FixedPrincipal("tester")


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def fake_repo(fake_store, clock, principal, sink):
    """Repository over the in-memory fake store."""
    repository = MediaRepository(
        fake_store, clock, principal, sink, batch_threshold=100, batch_policy="leading"
    )
    yield repository
    repository.close()


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_db_engine("sqlite+pysqlite:///:memory:", echo=False)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Provide database session, closed after the test."""
    session = create_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def uow(db_session):
    return DatabaseUnitOfWork(db_session)


@pytest.fixture
def repo(uow, clock, principal, sink):
    """Repository over a real SQLite store."""
    repository = MediaRepository(
        uow, clock, principal, sink, batch_threshold=100, batch_policy="leading"
    )
    yield repository
    repository.close()
