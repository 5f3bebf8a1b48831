"""Repository layer for database operations with SQLAlchemy 2.0."""

# Re-export core components
from maple.infrastructure.persistence.repositories.mappers import (
    AudioDeviceMapper,
    BaseModelMapper,
    MediaItemMapper,
    MediaPlayerMapper,
    ModelMapper,
    PlaylistMapper,
)
from maple.infrastructure.persistence.repositories.media_repository import (
    MediaRepository,
)
from maple.infrastructure.persistence.repositories.repo_decorator import db_operation
from maple.infrastructure.persistence.repositories.traits import (
    TRAITS_BY_KIND,
    EntityTraits,
    traits_for,
)

# Define public API
__all__ = [
    "TRAITS_BY_KIND",
    "AudioDeviceMapper",
    "BaseModelMapper",
    "EntityTraits",
    "MediaItemMapper",
    "MediaPlayerMapper",
    "MediaRepository",
    "ModelMapper",
    "PlaylistMapper",
    "db_operation",
    "traits_for",
]
