"""Display components and the insight presenter."""

from badge_insights.ui.components import (
    AddressBlock,
    DisplayDocument,
    Divider,
    Heading,
    Panel,
    Text,
    address,
    divider,
    heading,
    panel,
    text,
)
from badge_insights.ui.presenter import render_insights, render_install_dialog

__all__ = [
    "AddressBlock",
    "DisplayDocument",
    "Divider",
    "Heading",
    "Panel",
    "Text",
    "address",
    "divider",
    "heading",
    "panel",
    "render_insights",
    "render_install_dialog",
    "text",
]
