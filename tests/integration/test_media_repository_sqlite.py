"""End-to-end repository behaviour against an in-memory SQLite database."""

import threading

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from maple.domain.errors import OperationCancelledError
from maple.infrastructure.persistence.database.db_models import (
    DBMediaItem,
    DBPlaylist,
)


class TestPlaylistRoundTrip:
    def test_create_assigns_ids_and_audit(self, saved_playlist, clock):
        assert saved_playlist.id > 0
        assert not saved_playlist.is_new
        assert saved_playlist.created_by == "tester"
        assert saved_playlist.created_on == clock.now
        assert all(item.id > 0 for item in saved_playlist.items)
        assert all(item.playlist_id == saved_playlist.id for item in saved_playlist.items)

    def test_get_by_id_attaches_items_in_sequence(self, repo, saved_playlist):
        loaded = repo.get_playlist_by_id(saved_playlist.id)

        assert loaded.title == "Road Trip"
        assert [item.title for item in loaded.items] == ["Intro", "Highway", "Outro"]
        assert [item.sequence for item in loaded.items] == [0, 1, 2]
        assert not loaded.is_new and not loaded.is_deleted

    def test_reloaded_playlist_has_only_creation_audit(
        self, repo, saved_playlist, clock, open_repository
    ):
        repo.close()

        loaded = open_repository().get_playlist_by_id(saved_playlist.id)

        for instance in (loaded, *loaded.items):
            assert instance.created_by == "tester"
            assert instance.created_on == clock.now
            assert instance.updated_by is None
            assert instance.updated_on is None

    def test_missing_playlist_is_none(self, repo):
        assert repo.get_playlist_by_id(12345) is None

    def test_get_all_groups_items_per_playlist(self, repo, saved_playlist):
        other = repo.new_playlist("Empty", siblings=[saved_playlist])
        repo.save(other)

        playlists = repo.get_all_playlists()

        assert [p.title for p in playlists] == ["Road Trip", "Empty"]
        assert len(playlists[0].items) == 3
        assert playlists[1].items == []

    def test_media_item_reads(self, repo, saved_playlist):
        first = saved_playlist.items[0]

        assert repo.get_media_item_by_id(first.id).title == "Intro"
        assert len(repo.get_media_items_by_playlist_id(saved_playlist.id)) == 3
        assert len(repo.get_all_media_items()) == 3
        assert repo.get_media_items_by_playlist_id(9999) == []


class TestUpdate:
    def test_update_stamps_updated_fields_only(self, repo, saved_playlist, clock):
        created_on = saved_playlist.created_on
        loaded = repo.get_playlist_by_id(saved_playlist.id)
        later = clock.advance(hours=2)

        loaded.title = "Road Trip (remastered)"
        repo.save(loaded)

        reloaded = repo.get_playlist_by_id(saved_playlist.id)
        assert reloaded.title == "Road Trip (remastered)"
        assert reloaded.created_on == created_on
        assert reloaded.updated_on == later
        assert reloaded.updated_by == "tester"
        assert all(item.updated_on == later for item in reloaded.items)

    def test_repeated_saves_advance_updated_on_only(self, repo, saved_playlist, clock):
        created_on = saved_playlist.created_on

        first = clock.advance(minutes=5)
        repo.save(saved_playlist)
        assert saved_playlist.updated_on == first
        assert saved_playlist.created_on == created_on

        second = clock.advance(minutes=5)
        repo.save(saved_playlist)
        reloaded = repo.get_playlist_by_id(saved_playlist.id)
        assert reloaded.updated_on == second
        assert reloaded.created_on == created_on
        assert reloaded.created_by == "tester"

    def test_adding_item_to_saved_playlist(self, repo, saved_playlist):
        loaded = repo.get_playlist_by_id(saved_playlist.id)
        added = repo.new_media_item("Encore", "/music/Encore.flac", playlist=loaded)

        repo.save(loaded)

        assert added.sequence == 3
        assert added.playlist_id == saved_playlist.id
        assert [i.title for i in repo.get_playlist_by_id(saved_playlist.id).items][-1] == (
            "Encore"
        )

    def test_removed_item_deleted_when_saved_deleted(self, repo, saved_playlist):
        loaded = repo.get_playlist_by_id(saved_playlist.id)
        victim = loaded.items[1]
        loaded.remove(victim)
        victim.mark_deleted()

        repo.save(victim)

        titles = [i.title for i in repo.get_playlist_by_id(saved_playlist.id).items]
        assert titles == ["Intro", "Outro"]

    def test_new_item_on_playlist_loaded_by_another_repository(
        self, repo, saved_playlist, open_repository
    ):
        loaded = repo.get_playlist_by_id(saved_playlist.id)
        repo.close()
        second = open_repository()
        added = second.new_media_item("Encore", "/music/Encore.flac", playlist=loaded)
        loaded.title = "Road Trip (live)"

        second.save(loaded)

        reloaded = open_repository().get_playlist_by_id(saved_playlist.id)
        assert reloaded.title == "Road Trip (live)"
        assert [i.title for i in reloaded.items] == [
            "Intro",
            "Highway",
            "Outro",
            "Encore",
        ]
        assert added.id > 0
        assert added.playlist_id == saved_playlist.id

    def test_new_player_for_playlist_loaded_by_another_repository(
        self, repo, saved_playlist, open_repository
    ):
        loaded = repo.get_playlist_by_id(saved_playlist.id)
        repo.close()
        second = open_repository()
        player = second.new_media_player("Main", playlist=loaded, is_primary=True)

        second.save(player)

        main = open_repository().get_main_media_player()
        assert main.playlist_id == saved_playlist.id
        assert len(main.playlist.items) == 3


class TestDelete:
    def test_delete_playlist_removes_items(self, repo, saved_playlist, db_session):
        saved_playlist.mark_deleted()

        repo.save(saved_playlist)

        assert repo.get_playlist_by_id(saved_playlist.id) is None
        assert db_session.scalar(select(func.count()).select_from(DBMediaItem)) == 0

    def test_delete_unflushed_record_is_dropped(self, repo, db_session):
        playlist = repo.new_playlist("Never stored")
        repo.save(playlist, is_root=False)
        playlist.mark_deleted()
        playlist.is_new = False

        repo.save(playlist)

        assert db_session.scalar(select(func.count()).select_from(DBPlaylist)) == 0


class TestMediaPlayers:
    @pytest.fixture
    def players(self, repo, saved_playlist):
        main = repo.new_media_player("Main", playlist=saved_playlist, is_primary=True)
        side = repo.new_media_player("Side", playlist=saved_playlist, siblings=[main])
        spare = repo.new_media_player("Spare", siblings=[main, side])
        repo.save(main)
        repo.save([side, spare])
        return main, side, spare

    def test_main_player_has_playlist(self, repo, players):
        main = repo.get_main_media_player()

        assert main.name == "Main"
        assert main.playlist is not None
        assert main.playlist.title == "Road Trip"
        assert len(main.playlist.items) == 3

    def test_optional_players(self, repo, players):
        optional = repo.get_all_optional_media_players()

        assert [p.name for p in optional] == ["Side", "Spare"]
        assert optional[0].playlist.title == "Road Trip"
        assert optional[1].playlist is None

    def test_player_by_id_and_all(self, repo, players):
        main, side, _ = players
        assert repo.get_media_player_by_id(side.id).name == "Side"
        assert len(repo.get_all_media_players()) == 3

    def test_new_player_cascades_new_playlist(self, repo):
        playlist = repo.new_playlist("Fresh")
        repo.new_media_item("One", "/one.mp3", playlist=playlist)
        player = repo.new_media_player("Solo", playlist=playlist, is_primary=True)

        repo.save(player)

        loaded = repo.get_main_media_player()
        assert loaded.playlist_id == playlist.id
        assert [i.title for i in loaded.playlist.items] == ["One"]

    def test_two_new_players_sharing_new_playlist(self, repo, sink):
        playlist = repo.new_playlist("Shared")
        first = repo.new_media_player("A", playlist=playlist)
        second = repo.new_media_player("B", playlist=playlist)

        repo.save(first, is_root=False)
        repo.save(second)

        assert sink.warnings == []
        assert {p.playlist_id for p in repo.get_all_media_players()} == {playlist.id}


class TestAudioDevices:
    def test_round_trip(self, repo):
        device = repo.new_audio_device("{0.0.0.00000000}.{abc}", "Speakers")
        repo.save(device)

        assert repo.get_audio_device_by_id(device.id).name == "Speakers"
        assert [d.os_id for d in repo.get_all_audio_devices()] == [
            "{0.0.0.00000000}.{abc}"
        ]

    def test_duplicate_os_id_fails_and_reports(self, repo, sink):
        repo.save(repo.new_audio_device("dup", "First"))

        with pytest.raises(IntegrityError):
            repo.save(repo.new_audio_device("dup", "Second"))

        assert len(sink.errors) == 1
        # session stays usable after the rollback
        assert len(repo.get_all_audio_devices()) == 1


class TestBatchSaves:
    def test_large_collection_is_committed_in_batches(self, repo, uow):
        playlists = [repo.new_playlist(f"P{n:03}", sequence=n) for n in range(250)]

        commits = []
        original_commit = uow.commit

        def counting_commit():
            commits.append(1)
            original_commit()

        uow.commit = counting_commit
        result = repo.save(playlists)

        assert result.commit_count == 4
        assert len(commits) == 4
        assert len(repo.get_all_playlists()) == 250

    def test_cancelled_collection_keeps_committed_prefix(self, repo):
        event = threading.Event()
        playlists = [repo.new_playlist(f"P{n}", sequence=n) for n in range(5)]

        repo.save(playlists[:1])
        event.set()
        with pytest.raises(OperationCancelledError):
            repo.save(playlists[1:], cancel_event=event)

        assert [p.title for p in repo.get_all_playlists()] == ["P0"]


class TestAsyncForms:
    async def test_async_save_and_reads(self, repo, clock):
        playlist = repo.new_playlist("Async")
        repo.new_media_item("Track", "/track.ogg", playlist=playlist)
        device = repo.new_audio_device("dev-1", "Headphones")

        await repo.save_async(playlist)
        await repo.save_async([device])

        loaded = await repo.get_playlist_by_id_async(playlist.id)
        assert loaded.title == "Async"
        assert [i.title for i in loaded.items] == ["Track"]
        assert len(await repo.get_all_playlists_async()) == 1
        assert (await repo.get_media_item_by_id_async(loaded.items[0].id)).title == "Track"
        assert len(await repo.get_media_items_by_playlist_id_async(playlist.id)) == 1
        assert len(await repo.get_all_media_items_async()) == 1
        assert (await repo.get_audio_device_by_id_async(device.id)).os_id == "dev-1"
        assert len(await repo.get_all_audio_devices_async()) == 1
        assert await repo.get_main_media_player_async() is None
        assert await repo.get_all_optional_media_players_async() == []
        assert await repo.get_all_media_players_async() == []
        assert await repo.get_media_player_by_id_async(1) is None

    async def test_async_results_match_sync(self, repo, saved_playlist):
        sync_titles = [p.title for p in repo.get_all_playlists()]
        async_titles = [p.title for p in await repo.get_all_playlists_async()]
        assert sync_titles == async_titles

    async def test_clock_advances_between_async_saves(self, repo, clock):
        playlist = repo.new_playlist("Timed")
        await repo.save_async(playlist)
        clock.advance(minutes=1)
        await repo.save_async(playlist)
        assert playlist.updated_on == clock.now
