"""Ethereum-style address patterns and payload traversal.

Signature and transaction payloads arrive as untyped JSON trees. The
``AddressExtractor`` walks such a tree depth-first and collects every
``0x``-prefixed 40-hex-character token it finds, either as a whole string
value or embedded in free text.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

# Substring form, used to scan free text
ADDRESS_PATTERN = re.compile(r"0x[a-fA-F0-9]{40}")

# Whole-value form
EXACT_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")

DEFAULT_MAX_DEPTH = 64


def is_valid_address(value: Any) -> bool:
    """Return ``True`` if *value* is a string that is exactly one address."""
    if not isinstance(value, str):
        return False
    return EXACT_ADDRESS_PATTERN.fullmatch(value) is not None


def find_addresses_in_text(text: str) -> list[str]:
    """Return all distinct addresses embedded in *text*, in order of appearance."""
    seen: set[str] = set()
    results: list[str] = []
    for m in ADDRESS_PATTERN.finditer(text):
        addr = m.group(0)
        if addr not in seen:
            seen.add(addr)
            results.append(addr)
    return results


def _dedupe(addresses: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for addr in addresses:
        if addr not in seen:
            seen.add(addr)
            unique.append(addr)
    return unique


def _children(node: Any) -> list[Any] | None:
    """Return the child values of a container node, or ``None`` for scalars."""
    if isinstance(node, Mapping):
        return list(node.values())
    if isinstance(node, (list, tuple)):
        return list(node)
    return None


class AddressExtractor:
    """Collects addresses from arbitrarily nested payloads.

    String values held inside a mapping or a sequence are inspected: a value
    that is exactly an address is recorded as-is, anything else is scanned
    for embedded addresses. A bare top-level string is not inspected.

    Traversal is iterative and bounded by *max_depth*; containers nested
    deeper than that are skipped rather than raising.

    Args:
        max_depth: Maximum container nesting to descend into. Defaults to
            ``get_settings().extraction.max_depth``.
    """

    def __init__(self, max_depth: int | None = None) -> None:
        if max_depth is None:
            from badge_insights.settings import get_settings

            max_depth = get_settings().extraction.max_depth
        self.max_depth = max_depth

    def extract(self, payload: Any) -> list[str]:
        """Return the deduplicated addresses found in *payload*, in discovery order."""
        found: list[str] = []
        truncated = False
        # (node, depth, held_by_container)
        stack: list[tuple[Any, int, bool]] = [(payload, 0, False)]

        while stack:
            node, depth, is_child = stack.pop()

            if isinstance(node, str):
                if is_child:
                    if is_valid_address(node):
                        found.append(node)
                    else:
                        found.extend(find_addresses_in_text(node))
                continue

            children = _children(node)
            if children is None:
                continue
            if depth >= self.max_depth:
                truncated = True
                continue
            for child in reversed(children):
                stack.append((child, depth + 1, True))

        if truncated:
            logger.debug("Payload nesting exceeded max_depth=%d; deeper values skipped", self.max_depth)

        return _dedupe(found)


def extract_addresses(payload: Any, *, max_depth: int | None = None) -> list[str]:
    """Convenience wrapper around :meth:`AddressExtractor.extract`."""
    return AddressExtractor(max_depth=max_depth).extract(payload)
