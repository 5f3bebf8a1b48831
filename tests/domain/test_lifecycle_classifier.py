"""Tests for lifecycle classification precedence."""

from types import SimpleNamespace

import pytest

from maple.domain.persistence import EntityAction, classify


@pytest.mark.parametrize(
    ("is_new", "is_deleted", "expected"),
    [
        (True, False, EntityAction.CREATE),
        (True, True, EntityAction.CREATE),
        (False, True, EntityAction.DELETE),
        (False, False, EntityAction.UPDATE),
    ],
)
def test_classify_precedence(is_new, is_deleted, expected):
    instance = SimpleNamespace(is_new=is_new, is_deleted=is_deleted)
    assert classify(instance) is expected


def test_working_instance_loaded_from_store_is_an_update(empty_playlist):
    empty_playlist.is_new = False
    assert classify(empty_playlist) is EntityAction.UPDATE

    empty_playlist.mark_deleted()
    assert classify(empty_playlist) is EntityAction.DELETE
