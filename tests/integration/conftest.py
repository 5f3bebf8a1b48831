"""Integration fixtures: repositories over a real in-memory SQLite store."""

import pytest

from maple.infrastructure.persistence.database.db_connection import (
    create_session_factory,
)
from maple.infrastructure.persistence.repositories.media_repository import (
    MediaRepository,
)
from maple.infrastructure.persistence.unit_of_work import DatabaseUnitOfWork


@pytest.fixture
def saved_playlist(repo):
    """A committed playlist with three items."""
    playlist = repo.new_playlist("Road Trip", "Songs for the drive")
    for title in ("Intro", "Highway", "Outro"):
        repo.new_media_item(title, f"/music/{title}.flac", playlist=playlist)
    repo.save(playlist)
    return playlist


@pytest.fixture
def open_repository(engine, clock, principal, sink):
    """Open further repositories on the same database, each with its own session."""
    opened = []

    def _open():
        session = create_session_factory(engine)()
        repository = MediaRepository(
            DatabaseUnitOfWork(session),
            clock,
            principal,
            sink,
            batch_threshold=100,
            batch_policy="leading",
        )
        opened.append(repository)
        return repository

    yield _open
    for repository in opened:
        repository.close()
