"""Notification sink backed by loguru."""

from maple.config import get_logger

logger = get_logger(__name__)


class LoguruNotificationSink:
    """Forward repository notifications to the application log."""

    def __init__(self, source: str = "maple.repository") -> None:
        self._logger = logger.bind(source=source)

    def info(self, message: str) -> None:
        self._logger.info("{}", message)

    def warn(self, message: str) -> None:
        self._logger.warning("{}", message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.opt(exception=exc).error("{}", message)
        else:
            self._logger.error("{}", message)
