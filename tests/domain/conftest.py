"""Domain fixtures: plain records wrapped in working instances."""

import pytest

from maple.domain.entities import MediaItem, Playlist
from maple.infrastructure.persistence.database.db_models import DBMediaItem, DBPlaylist


@pytest.fixture
def empty_playlist():
    return Playlist.new(DBPlaylist(title="Empty"))


@pytest.fixture
def make_item():
    """Factory for unsaved media items."""

    def _make(title: str = "Track", sequence: int | None = None) -> MediaItem:
        return MediaItem.new(
            DBMediaItem(title=title, location=f"/music/{title}.mp3", sequence=sequence)
        )

    return _make
