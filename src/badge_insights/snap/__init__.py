"""Host lifecycle handlers and host capability interfaces."""

from badge_insights.snap.handlers import SnapHandlers
from badge_insights.snap.host import HostCapabilities, LoggingHost

__all__ = ["HostCapabilities", "LoggingHost", "SnapHandlers"]
