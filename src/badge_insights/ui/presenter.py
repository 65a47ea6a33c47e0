"""Turn insights into the host display document."""

from __future__ import annotations

from typing import Sequence

from badge_insights.models import Insight
from badge_insights.ui.components import DisplayDocument, Panel, address, divider, heading, panel, text

INSIGHTS_HEADING = "BitBadges Insights"
INSTALL_HEADING = "Thank you for installing the BitBadges Snap!"
INSTALL_MESSAGE = (
    "To additionally configure this snap to verify specific ownership requirements for addresses "
    "(e.g. bob.eth owns x1 of this NFT or owns x0 of this badge), visit [{display}]({url})."
)


def render_insights(
    insights: Sequence[Insight],
    *,
    portfolio_url_template: str | None = None,
    settings_url: str | None = None,
) -> DisplayDocument:
    """Build the insight panel.

    Layout: heading, then per insight a divider, the address, a portfolio
    link and one ``"<label> - <message>"`` line per check; closed by a
    divider and a link to the settings page.
    """
    if portfolio_url_template is None or settings_url is None:
        from badge_insights.settings import get_settings

        ui = get_settings().ui
        portfolio_url_template = portfolio_url_template or ui.portfolio_url_template
        settings_url = settings_url or ui.settings_url

    children = [heading(INSIGHTS_HEADING)]
    for insight in insights:
        portfolio_url = portfolio_url_template.format(address=insight.value)
        children.extend(
            [
                divider(),
                address(insight.value),
                text(f"[Portfolio]({portfolio_url})"),
            ]
        )
        children.extend(text(f"{check.label} - {check.message}") for check in insight.balance_checks)

    children.extend(
        [
            divider(),
            text(f"Click [here]({settings_url}) to manage your settings for this snap."),
        ]
    )
    return DisplayDocument(content=panel(children))


def render_install_dialog(settings_url: str | None = None) -> Panel:
    """Build the one-time onboarding alert shown on install."""
    if settings_url is None:
        from badge_insights.settings import get_settings

        settings_url = get_settings().ui.settings_url
    display = settings_url.split("://", 1)[-1]
    return panel(
        [
            heading(INSTALL_HEADING),
            text(INSTALL_MESSAGE.format(display=display, url=settings_url)),
        ]
    )
