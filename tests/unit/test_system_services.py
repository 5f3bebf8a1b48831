"""Tests for the system clock, principal resolver and notification sink."""

from datetime import UTC
import getpass

from loguru import logger
import pytest

from maple.config import settings
from maple.infrastructure.services import (
    LoguruNotificationSink,
    SystemClock,
    SystemPrincipalResolver,
)


def test_clock_is_utc():
    assert SystemClock().utc_now().tzinfo is UTC


class TestPrincipalResolver:
    def test_explicit_override_wins(self, monkeypatch):
        monkeypatch.setattr(settings.identity, "principal", "configured")
        assert SystemPrincipalResolver("override").current_principal_id() == "override"

    def test_configured_principal(self, monkeypatch):
        monkeypatch.setattr(settings.identity, "principal", "  configured  ")
        assert SystemPrincipalResolver().current_principal_id() == "configured"

    def test_operating_system_user(self, monkeypatch):
        monkeypatch.setattr(settings.identity, "principal", "")
        monkeypatch.setattr(getpass, "getuser", lambda: "alice")
        assert SystemPrincipalResolver().current_principal_id() == "alice"

    def test_falls_back_to_uid(self, monkeypatch):
        def no_user():
            raise OSError("no login name")

        monkeypatch.setattr(settings.identity, "principal", "")
        monkeypatch.setattr(getpass, "getuser", no_user)

        principal = SystemPrincipalResolver().current_principal_id()

        assert principal
        assert principal.strip() == principal


@pytest.fixture
def captured_logs():
    messages = []
    handler_id = logger.add(
        lambda message: messages.append(message.record), level="DEBUG"
    )
    yield messages
    logger.remove(handler_id)


class TestLoguruNotificationSink:
    def test_levels(self, captured_logs):
        sink = LoguruNotificationSink()

        sink.info("saved {braces} safely")
        sink.warn("careful")
        sink.error("failed")

        levels = [(r["level"].name, r["message"]) for r in captured_logs]
        assert ("INFO", "saved {braces} safely") in levels
        assert ("WARNING", "careful") in levels
        assert ("ERROR", "failed") in levels

    def test_error_attaches_exception(self, captured_logs):
        sink = LoguruNotificationSink()
        try:
            raise ValueError("bad value")
        except ValueError as e:
            sink.error("save failed", e)

        record = next(r for r in captured_logs if r["message"] == "save failed")
        assert record["exception"] is not None
        assert record["exception"].type is ValueError
