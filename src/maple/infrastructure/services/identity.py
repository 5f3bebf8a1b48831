"""Clock and principal sources for audit stamping."""

from datetime import UTC, datetime
import getpass
import os

from maple.config import get_logger, settings

logger = get_logger(__name__)


class SystemClock:
    """Wall clock in UTC."""

    def utc_now(self) -> datetime:
        return datetime.now(UTC)


class SystemPrincipalResolver:
    """Resolve the audit principal.

    Order: explicit override, configured ``identity.principal``, the operating
    system login name, and finally the numeric user id.
    """

    def __init__(self, override: str | None = None) -> None:
        self._override = override

    def current_principal_id(self) -> str:
        configured = self._override or settings.identity.principal
        if configured and configured.strip():
            return configured.strip()

        try:
            return getpass.getuser()
        except (KeyError, OSError) as e:
            # No login name (containers without a passwd entry)
            logger.debug("Falling back to numeric user id: {}", e)
            getuid = getattr(os, "getuid", None)
            return f"uid:{getuid()}" if getuid is not None else "unknown"
