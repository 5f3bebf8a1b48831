"""Unit test fixtures - reuse the domain factories for repository tests."""

from tests.domain.conftest import empty_playlist, make_item

# Re-export for pytest discovery
__all__ = ["empty_playlist", "make_item"]
