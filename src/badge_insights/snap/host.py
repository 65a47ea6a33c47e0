"""Host runtime capabilities the handlers depend on."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from badge_insights.ui.components import Panel

logger = logging.getLogger(__name__)


@runtime_checkable
class HostCapabilities(Protocol):
    """Outbound calls into the host wallet runtime."""

    async def show_alert(self, content: Panel) -> None:
        """Display a one-time alert dialog."""
        ...


class LoggingHost:
    """Host stand-in that records alerts and writes them to the log.

    Used when no wallet runtime is attached, e.g. from the CLI or the HTTP bridge.
    """

    def __init__(self) -> None:
        self.alerts: list[Panel] = []

    async def show_alert(self, content: Panel) -> None:
        self.alerts.append(content)
        titles = [c.value for c in content.children if c.type == "heading"]
        logger.info("Alert dialog: %s", " / ".join(titles) or "(untitled)")
