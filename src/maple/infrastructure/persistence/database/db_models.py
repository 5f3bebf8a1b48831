"""SQLAlchemy database models for the Maple media store.

This module defines the persisted records and their relationships using
SQLAlchemy 2.0 patterns with proper type annotations and relationship definitions.
Audit columns carry no defaults: values come only from audit stamping.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Engine,
    ForeignKey,
    Index,
    MetaData,
    String,
    UniqueConstraint,
    inspect,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from maple.config import get_logger
from maple.domain.entities import DeviceType, EntityKind, RepeatMode

# Create module logger
logger = get_logger(__name__)

# Define naming convention for constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",  # Index
    "uq": "uq_%(table_name)s_%(column_0_label)s",  # Unique constraint
    "ck": "ck_%(table_name)s_%(constraint_name)s",  # Check constraint
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",  # Foreign key
    "pk": "pk_%(table_name)s",  # Primary key
}

# Create metadata with naming convention
metadata = MetaData(naming_convention=convention)


class MapleDBBase(DeclarativeBase):
    """Base class for all database models with ordering and audit columns."""

    # Use the metadata with naming convention
    metadata = metadata

    id: Mapped[int] = mapped_column(primary_key=True)
    sequence: Mapped[int] = mapped_column(default=0, nullable=False)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    updated_by: Mapped[str | None] = mapped_column(String(255))
    updated_on: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class DBPlaylist(MapleDBBase):
    """Playlist metadata; owns its media items."""

    __tablename__ = "playlists"

    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(String(1000))
    repeat_mode: Mapped[str] = mapped_column(String(16), default=RepeatMode.NONE)
    is_shuffeling: Mapped[bool] = mapped_column(Boolean, default=False)

    # Relationships
    items: Mapped[list["DBMediaItem"]] = relationship(
        back_populates="playlist",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[DBMediaItem.sequence, DBMediaItem.id]",
    )


class DBMediaItem(MapleDBBase):
    """A playable location within a playlist."""

    __tablename__ = "media_items"

    title: Mapped[str] = mapped_column(String(255))
    location: Mapped[str] = mapped_column(String(2048))
    duration_ms: Mapped[int | None]
    playlist_id: Mapped[int] = mapped_column(
        ForeignKey("playlists.id", ondelete="CASCADE"), index=True
    )

    # Relationships
    playlist: Mapped[DBPlaylist] = relationship(back_populates="items")


class DBAudioDevice(MapleDBBase):
    """Output device as reported by the operating system."""

    __tablename__ = "audio_devices"

    os_id: Mapped[str] = mapped_column(String(255))
    name: Mapped[str] = mapped_column(String(255))
    device_type: Mapped[str] = mapped_column(String(32), default=DeviceType.UNKNOWN)

    __table_args__ = (UniqueConstraint("os_id"),)


class DBMediaPlayer(MapleDBBase):
    """Player bound to a playlist and optionally an audio device."""

    __tablename__ = "media_players"

    name: Mapped[str] = mapped_column(String(255))
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)
    playlist_id: Mapped[int | None] = mapped_column(
        ForeignKey("playlists.id", ondelete="SET NULL")
    )
    audio_device_id: Mapped[int | None] = mapped_column(
        ForeignKey("audio_devices.id", ondelete="SET NULL")
    )

    # Relationships
    playlist: Mapped[DBPlaylist | None] = relationship()

    __table_args__ = (Index(None, "is_primary"),)


# Record class per persisted kind
MODEL_BY_KIND: dict[EntityKind, type[MapleDBBase]] = {
    EntityKind.PLAYLIST: DBPlaylist,
    EntityKind.MEDIA_ITEM: DBMediaItem,
    EntityKind.MEDIA_PLAYER: DBMediaPlayer,
    EntityKind.AUDIO_DEVICE: DBAudioDevice,
}


def init_db(engine: Engine) -> list[str]:
    """Initialize database schema.

    Creates all tables if they don't exist.
    This is a safe operation that won't affect existing data.

    Returns:
        Table names present after initialization
    """
    try:
        existing_tables = inspect(engine).get_table_names()
        if existing_tables:
            logger.info("Found existing tables: {}", existing_tables)

        # Create tables - SQLAlchemy will skip tables that already exist
        MapleDBBase.metadata.create_all(engine)
        tables = inspect(engine).get_table_names()
    except Exception as e:
        logger.error("Database initialization failed: {}", e)
        raise
    else:
        logger.info("Database schema initialization complete")
        return tables
