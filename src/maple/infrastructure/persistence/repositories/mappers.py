"""Mapping between persisted records and working instances.

Working instances wrap their record rather than copying it, so mapping is
cheap: ``to_domain`` wraps a loaded record with both lifecycle flags cleared,
``to_db`` hands back the wrapped record, and ``new`` builds a fresh record
flagged for creation.
"""

from collections.abc import Iterable
from typing import Any, ClassVar, Generic, Protocol, TypeVar

from attrs import define

from maple.domain.entities import (
    AudioDevice,
    DeviceType,
    MediaItem,
    MediaPlayer,
    Playlist,
    RepeatMode,
    WorkingInstance,
)
from maple.infrastructure.persistence.database.db_models import (
    DBAudioDevice,
    DBMediaItem,
    DBMediaPlayer,
    DBPlaylist,
    MapleDBBase,
)

TDBModel = TypeVar("TDBModel", bound=MapleDBBase)
TDomainModel = TypeVar("TDomainModel", bound=WorkingInstance)


class ModelMapper(Protocol[TDBModel, TDomainModel]):
    """Protocol for bidirectional mapping between models."""

    @classmethod
    def to_domain(cls, db_model: TDBModel) -> TDomainModel:
        """Wrap a loaded database record."""
        ...

    @staticmethod
    def to_db(domain_model: TDomainModel) -> TDBModel:
        """Return the record behind a working instance."""
        ...

    @classmethod
    def map_collection(cls, db_models: Iterable[TDBModel]) -> list[TDomainModel]:
        """Map a collection of DB models to domain models."""
        ...

    @classmethod
    def new(cls, **values: Any) -> TDomainModel:
        """Build a never-persisted working instance."""
        ...


@define(frozen=True, slots=True)
class BaseModelMapper(Generic[TDBModel, TDomainModel]):
    """Base implementation of ModelMapper with common functionality.

    Subclasses only name the two classes involved:

        @define(frozen=True, slots=True)
        class PlaylistMapper(BaseModelMapper[DBPlaylist, Playlist]):
            db_class = DBPlaylist
            domain_class = Playlist
    """

    db_class: ClassVar[type[Any]]
    domain_class: ClassVar[type[Any]]
    defaults: ClassVar[dict[str, Any]] = {}

    @classmethod
    def to_domain(cls, db_model: TDBModel) -> TDomainModel:
        return cls.domain_class(db_model)

    @staticmethod
    def to_db(domain_model: TDomainModel) -> TDBModel:
        return domain_model.record

    @classmethod
    def map_collection(cls, db_models: Iterable[TDBModel]) -> list[TDomainModel]:
        return [cls.to_domain(db_model) for db_model in db_models]

    @classmethod
    def new(cls, **values: Any) -> TDomainModel:
        # Column defaults only apply at insert; set them now so the working
        # instance reads sensible values before the first save
        record = cls.db_class(**{**cls.defaults, **values})
        return cls.domain_class.new(record)


@define(frozen=True, slots=True)
class PlaylistMapper(BaseModelMapper[DBPlaylist, Playlist]):
    db_class = DBPlaylist
    domain_class = Playlist
    defaults: ClassVar[dict[str, Any]] = {
        "repeat_mode": RepeatMode.NONE,
        "is_shuffeling": False,
    }


@define(frozen=True, slots=True)
class MediaItemMapper(BaseModelMapper[DBMediaItem, MediaItem]):
    db_class = DBMediaItem
    domain_class = MediaItem


@define(frozen=True, slots=True)
class MediaPlayerMapper(BaseModelMapper[DBMediaPlayer, MediaPlayer]):
    db_class = DBMediaPlayer
    domain_class = MediaPlayer
    defaults: ClassVar[dict[str, Any]] = {"is_primary": False}


@define(frozen=True, slots=True)
class AudioDeviceMapper(BaseModelMapper[DBAudioDevice, AudioDevice]):
    db_class = DBAudioDevice
    domain_class = AudioDevice
    defaults: ClassVar[dict[str, Any]] = {"device_type": DeviceType.UNKNOWN}
