"""Media repository: reconcile working instances with the store.

Every save follows the same path whatever the entity kind:

1. enter a busy scope
2. classify the instance (create, update or delete)
3. stamp audit fields and stage the change in the store
4. cascade to children as non-root saves (create and update only)
5. commit, but only for the root call

Collections go through the batch commit controller so a large save is split
into bounded transactions. Async forms run the same code on a worker thread.
"""

import asyncio
from collections.abc import Callable, Iterable
import functools
import threading
from typing import Any, Self

from maple.application.utilities.batching import (
    BatchCommitController,
    BatchCommitPolicy,
    BatchCommitResult,
)
from maple.config import get_logger, settings
from maple.domain.entities import (
    AudioDevice,
    EntityKind,
    MediaItem,
    MediaPlayer,
    Playlist,
    WorkingInstance,
    next_free_sequence,
)
from maple.domain.errors import (
    OperationCancelledError,
    RepositoryClosedError,
    UnsupportedEntityError,
)
from maple.domain.persistence import (
    BusyGuard,
    EntityAction,
    cascade_children,
    classify,
    stamp_create,
    stamp_update,
)
from maple.domain.repositories.interfaces import (
    ClockProtocol,
    NotificationSinkProtocol,
    PrincipalResolverProtocol,
    StoreProtocol,
)

from .mappers import (
    AudioDeviceMapper,
    MediaItemMapper,
    MediaPlayerMapper,
    PlaylistMapper,
)
from .traits import EntityTraits, traits_for

logger = get_logger(__name__)


class MediaRepository:
    """Typed reads and lifecycle-aware saves for media entities.

    The repository owns its store exclusively and disposes it on ``close()``.
    Two root saves running concurrently on one repository may interleave their
    commits; callers that need isolation must serialize them.
    """

    def __init__(
        self,
        store: StoreProtocol,
        clock: ClockProtocol,
        principal_resolver: PrincipalResolverProtocol,
        notifications: NotificationSinkProtocol,
        *,
        batch_threshold: int | None = None,
        batch_policy: BatchCommitPolicy | str | None = None,
        on_busy_changed: Callable[[bool], None] | None = None,
    ) -> None:
        for name, value in (
            ("store", store),
            ("clock", clock),
            ("principal_resolver", principal_resolver),
            ("notifications", notifications),
        ):
            if value is None:
                raise ValueError(f"{name} is required")

        self._store = store
        self._clock = clock
        self._principal_resolver = principal_resolver
        self._notifications = notifications
        self._busy = BusyGuard(on_busy_changed)
        self._batches = BatchCommitController(
            commit=self._commit,
            threshold=(
                settings.persistence.batch_threshold
                if batch_threshold is None
                else batch_threshold
            ),
            policy=batch_policy or settings.persistence.batch_commit_policy,
            logger=logger,
        )
        self._closed = False
        # Instances whose create is staged but not yet committed
        self._staged_creates: list[WorkingInstance] = []

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    @property
    def is_busy(self) -> bool:
        return self._busy.is_busy

    @property
    def busy_guard(self) -> BusyGuard:
        return self._busy

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Dispose the store. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._store.dispose()
        logger.debug("Media repository closed")

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise RepositoryClosedError("Media repository has been closed")

    # -------------------------------------------------------------------------
    # SAVE
    # -------------------------------------------------------------------------

    def save(
        self,
        entity: WorkingInstance | Iterable[WorkingInstance],
        is_root: bool = True,
        *,
        cancel_event: threading.Event | None = None,
    ) -> BatchCommitResult | None:
        """Persist a working instance or a collection of them.

        Args:
            entity: A working instance, or any iterable of working instances
            is_root: Whether this call owns the transaction and commits it
            cancel_event: Checked before each collection item and before the
                root commit

        Returns:
            Batch counts for a collection save, None for a single instance

        Raises:
            OperationCancelledError: ``cancel_event`` was set before commit
            UnsupportedEntityError: ``entity`` is not a working instance
        """
        self._ensure_open()

        if isinstance(entity, WorkingInstance):
            run = functools.partial(
                self._persist, traits_for(entity), entity, is_root, cancel_event
            )
        elif isinstance(entity, Iterable) and not isinstance(entity, str | bytes):
            run = functools.partial(
                self._save_collection, entity, is_root, cancel_event
            )
        else:
            raise UnsupportedEntityError(entity)

        if not is_root:
            return run()

        try:
            return run()
        except Exception as e:
            self._store.rollback()
            self._restore_staged_creates()
            if isinstance(e, OperationCancelledError):
                self._notifications.info(f"Save cancelled: {e}")
            else:
                self._notifications.error(f"Save failed: {e}", e)
            raise

    async def save_async(
        self,
        entity: WorkingInstance | Iterable[WorkingInstance],
        is_root: bool = True,
        *,
        cancel_event: threading.Event | None = None,
    ) -> BatchCommitResult | None:
        """Run ``save`` on a worker thread.

        Cancelling the awaiting task sets the cancel event, so the worker stops
        before its next item or commit.
        """
        event = cancel_event or threading.Event()
        try:
            return await asyncio.to_thread(
                self.save, entity, is_root, cancel_event=event
            )
        except asyncio.CancelledError:
            event.set()
            raise

    def _save_collection(
        self,
        entities: Iterable[WorkingInstance],
        is_root: bool,
        cancel_event: threading.Event | None,
    ) -> BatchCommitResult:
        with self._busy.acquire():
            result = self._batches.save_batch(
                entities,
                self._save_entity,
                is_root=is_root,
                should_cancel=cancel_event.is_set if cancel_event else None,
            )
        logger.debug(
            "Saved collection",
            processed=result.processed_count,
            commits=result.commit_count,
        )
        return result

    def _save_entity(self, entity: WorkingInstance, is_root: bool) -> None:
        self._persist(traits_for(entity), entity, is_root)

    def _persist(
        self,
        traits: EntityTraits,
        entity: WorkingInstance,
        is_root: bool,
        cancel_event: threading.Event | None = None,
    ) -> None:
        with self._busy.acquire():
            action = classify(entity)

            if action is EntityAction.CREATE:
                self._create(traits, entity)
            elif action is EntityAction.DELETE:
                self._store.remove(traits.kind, traits.mapper.to_db(entity))
            elif not self._update(traits, entity):
                return

            if action is not EntityAction.DELETE:
                cascade_children(
                    entity, traits.children, self._child_saver(traits, entity)
                )

            if is_root:
                if cancel_event is not None and cancel_event.is_set():
                    raise OperationCancelledError(
                        f"Save of {traits.kind} {entity.id} cancelled before commit"
                    )
                self._commit()

    def _child_saver(
        self, traits: EntityTraits, parent: WorkingInstance
    ) -> Callable[[WorkingInstance, bool], None]:
        def save_child(child: WorkingInstance, is_root: bool) -> None:
            child_traits = traits_for(child)
            traits.link(parent, child)
            self._persist(child_traits, child, is_root)

        return save_child

    def _create(self, traits: EntityTraits, entity: WorkingInstance) -> None:
        record = traits.mapper.to_db(entity)
        stamp_create(
            record, self._principal_resolver.current_principal_id(), self._clock.utc_now()
        )
        self._store.add(traits.kind, record)
        # Staged: the next save of this instance is an update
        entity.is_new = False
        self._staged_creates.append(entity)

    def _update(self, traits: EntityTraits, entity: WorkingInstance) -> bool:
        if not entity.id and entity in self._staged_creates:
            # Created earlier in this unit of work; its insert is still pending
            return True

        tracked = self._store.find_by_id(traits.kind, entity.id)
        if tracked is None:
            self._notifications.warn(
                f"Cannot update {traits.kind} {entity.id}: not found in store"
            )
            return False

        record = traits.mapper.to_db(entity)
        stamp_update(
            record, self._principal_resolver.current_principal_id(), self._clock.utc_now()
        )
        self._store.copy_current_values(tracked, record)
        return True

    def _commit(self) -> None:
        self._store.commit()
        self._staged_creates.clear()

    def _restore_staged_creates(self) -> None:
        # Rolled back inserts must be created again by the next save
        for entity in self._staged_creates:
            entity.is_new = True
        self._staged_creates.clear()

    # -------------------------------------------------------------------------
    # NEW INSTANCES
    # -------------------------------------------------------------------------

    def new_playlist(
        self,
        title: str,
        description: str | None = None,
        *,
        siblings: Iterable[Playlist] | None = None,
        **values: Any,
    ) -> Playlist:
        """Create an unsaved playlist, sequenced after ``siblings`` when given."""
        if siblings is not None:
            values.setdefault("sequence", next_free_sequence(siblings))
        return PlaylistMapper.new(title=title, description=description, **values)

    def new_media_item(
        self,
        title: str,
        location: str,
        *,
        playlist: Playlist | None = None,
        **values: Any,
    ) -> MediaItem:
        """Create an unsaved media item, appended to ``playlist`` when given."""
        item = MediaItemMapper.new(title=title, location=location, **values)
        if playlist is not None:
            playlist.add(item)
        return item

    def new_media_player(
        self,
        name: str,
        *,
        playlist: Playlist | None = None,
        siblings: Iterable[MediaPlayer] | None = None,
        **values: Any,
    ) -> MediaPlayer:
        """Create an unsaved media player bound to ``playlist``."""
        if siblings is not None:
            values.setdefault("sequence", next_free_sequence(siblings))
        player = MediaPlayerMapper.new(name=name, **values)
        player.playlist = playlist
        return player

    def new_audio_device(
        self,
        os_id: str,
        name: str,
        *,
        siblings: Iterable[AudioDevice] | None = None,
        **values: Any,
    ) -> AudioDevice:
        """Create an unsaved audio device."""
        if not os_id or not os_id.strip():
            raise ValueError("Audio device os_id must be a non-blank string")
        if siblings is not None:
            values.setdefault("sequence", next_free_sequence(siblings))
        return AudioDeviceMapper.new(os_id=os_id, name=name, **values)

    # -------------------------------------------------------------------------
    # READ: PLAYLISTS AND ITEMS
    # -------------------------------------------------------------------------

    def get_playlist_by_id(self, playlist_id: int) -> Playlist | None:
        """Load a playlist with its items ordered by sequence."""
        self._ensure_open()
        with self._busy.acquire():
            record = self._store.find_by_id(EntityKind.PLAYLIST, playlist_id)
            if record is None:
                return None
            return self._load_playlist(record)

    def get_all_playlists(self) -> list[Playlist]:
        """Load every playlist, each with its own items."""
        self._ensure_open()
        with self._busy.acquire():
            records = self._store.find_all(EntityKind.PLAYLIST)
            items_by_playlist: dict[int, list[MediaItem]] = {}
            for item in MediaItemMapper.map_collection(
                self._store.find_all(EntityKind.MEDIA_ITEM)
            ):
                items_by_playlist.setdefault(item.playlist_id, []).append(item)

            playlists = PlaylistMapper.map_collection(records)
            for playlist in playlists:
                playlist.items = items_by_playlist.get(playlist.id, [])
            return playlists

    def get_media_item_by_id(self, item_id: int) -> MediaItem | None:
        self._ensure_open()
        with self._busy.acquire():
            record = self._store.find_by_id(EntityKind.MEDIA_ITEM, item_id)
            return MediaItemMapper.to_domain(record) if record is not None else None

    def get_media_items_by_playlist_id(self, playlist_id: int) -> list[MediaItem]:
        self._ensure_open()
        with self._busy.acquire():
            return MediaItemMapper.map_collection(
                self._store.find_all(EntityKind.MEDIA_ITEM, playlist_id=playlist_id)
            )

    def get_all_media_items(self) -> list[MediaItem]:
        self._ensure_open()
        with self._busy.acquire():
            return MediaItemMapper.map_collection(
                self._store.find_all(EntityKind.MEDIA_ITEM)
            )

    def _load_playlist(self, record: Any) -> Playlist:
        playlist = PlaylistMapper.to_domain(record)
        playlist.items = MediaItemMapper.map_collection(
            self._store.find_all(EntityKind.MEDIA_ITEM, playlist_id=playlist.id)
        )
        return playlist

    # -------------------------------------------------------------------------
    # READ: MEDIA PLAYERS
    # -------------------------------------------------------------------------

    def get_media_player_by_id(self, player_id: int) -> MediaPlayer | None:
        """Load a media player with its playlist attached."""
        self._ensure_open()
        with self._busy.acquire():
            record = self._store.find_by_id(EntityKind.MEDIA_PLAYER, player_id)
            if record is None:
                return None
            return self._load_player(record)

    def get_all_media_players(self) -> list[MediaPlayer]:
        self._ensure_open()
        with self._busy.acquire():
            return [
                self._load_player(record)
                for record in self._store.find_all(EntityKind.MEDIA_PLAYER)
            ]

    def get_main_media_player(self) -> MediaPlayer | None:
        """Load the primary media player, or None when no player is primary.

        More than one primary player is a caller error; the lowest id wins and
        a warning is emitted.
        """
        self._ensure_open()
        with self._busy.acquire():
            records = self._store.find_all(EntityKind.MEDIA_PLAYER, is_primary=True)
            if not records:
                return None
            if len(records) > 1:
                self._notifications.warn(
                    f"Found {len(records)} primary media players, using the lowest id"
                )
            return self._load_player(min(records, key=lambda record: record.id))

    def get_all_optional_media_players(self) -> list[MediaPlayer]:
        """Load every non-primary media player with its playlist."""
        self._ensure_open()
        with self._busy.acquire():
            return [
                self._load_player(record)
                for record in self._store.find_all(
                    EntityKind.MEDIA_PLAYER, is_primary=False
                )
            ]

    def _load_player(self, record: Any) -> MediaPlayer:
        player = MediaPlayerMapper.to_domain(record)
        if player.playlist_id:
            playlist_record = self._store.find_by_id(
                EntityKind.PLAYLIST, player.playlist_id
            )
            if playlist_record is not None:
                player.playlist = self._load_playlist(playlist_record)
        return player

    # -------------------------------------------------------------------------
    # READ: AUDIO DEVICES
    # -------------------------------------------------------------------------

    def get_audio_device_by_id(self, device_id: int) -> AudioDevice | None:
        self._ensure_open()
        with self._busy.acquire():
            record = self._store.find_by_id(EntityKind.AUDIO_DEVICE, device_id)
            return AudioDeviceMapper.to_domain(record) if record is not None else None

    def get_all_audio_devices(self) -> list[AudioDevice]:
        self._ensure_open()
        with self._busy.acquire():
            return AudioDeviceMapper.map_collection(
                self._store.find_all(EntityKind.AUDIO_DEVICE)
            )

    # -------------------------------------------------------------------------
    # ASYNC FORMS
    # -------------------------------------------------------------------------

    async def get_playlist_by_id_async(self, playlist_id: int) -> Playlist | None:
        return await asyncio.to_thread(self.get_playlist_by_id, playlist_id)

    async def get_all_playlists_async(self) -> list[Playlist]:
        return await asyncio.to_thread(self.get_all_playlists)

    async def get_media_item_by_id_async(self, item_id: int) -> MediaItem | None:
        return await asyncio.to_thread(self.get_media_item_by_id, item_id)

    async def get_media_items_by_playlist_id_async(
        self, playlist_id: int
    ) -> list[MediaItem]:
        return await asyncio.to_thread(self.get_media_items_by_playlist_id, playlist_id)

    async def get_all_media_items_async(self) -> list[MediaItem]:
        return await asyncio.to_thread(self.get_all_media_items)

    async def get_media_player_by_id_async(self, player_id: int) -> MediaPlayer | None:
        return await asyncio.to_thread(self.get_media_player_by_id, player_id)

    async def get_all_media_players_async(self) -> list[MediaPlayer]:
        return await asyncio.to_thread(self.get_all_media_players)

    async def get_main_media_player_async(self) -> MediaPlayer | None:
        return await asyncio.to_thread(self.get_main_media_player)

    async def get_all_optional_media_players_async(self) -> list[MediaPlayer]:
        return await asyncio.to_thread(self.get_all_optional_media_players)

    async def get_audio_device_by_id_async(self, device_id: int) -> AudioDevice | None:
        return await asyncio.to_thread(self.get_audio_device_by_id, device_id)

    async def get_all_audio_devices_async(self) -> list[AudioDevice]:
        return await asyncio.to_thread(self.get_all_audio_devices)
