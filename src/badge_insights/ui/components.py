"""Display components understood by the host renderer.

Each component serializes to the host's ``{"type": ..., "value": ...}`` shape,
e.g. ``{"type": "heading", "value": "BitBadges Insights"}``.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class Heading(BaseModel):
    type: Literal["heading"] = "heading"
    value: str


class Divider(BaseModel):
    type: Literal["divider"] = "divider"


class Text(BaseModel):
    """Markdown-capable text line."""

    type: Literal["text"] = "text"
    value: str


class AddressBlock(BaseModel):
    type: Literal["address"] = "address"
    value: str


Component = Annotated[Union[Heading, Divider, Text, AddressBlock], Field(discriminator="type")]


class Panel(BaseModel):
    """Ordered container of components."""

    type: Literal["panel"] = "panel"
    children: list[Component] = Field(default_factory=list)


class DisplayDocument(BaseModel):
    """What an insight handler returns to the host."""

    content: Panel


def heading(value: str) -> Heading:
    return Heading(value=value)


def divider() -> Divider:
    return Divider()


def text(value: str) -> Text:
    return Text(value=value)


def address(value: str) -> AddressBlock:
    return AddressBlock(value=value)


def panel(children: list[Heading | Divider | Text | AddressBlock]) -> Panel:
    return Panel(children=children)
