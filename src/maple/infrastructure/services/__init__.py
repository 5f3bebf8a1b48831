"""System-backed implementations of the repository's collaborator protocols."""

from .identity import SystemClock, SystemPrincipalResolver
from .notifications import LoguruNotificationSink

__all__ = ["LoguruNotificationSink", "SystemClock", "SystemPrincipalResolver"]
