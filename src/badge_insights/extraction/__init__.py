"""Address discovery for signing and transaction payloads."""

from badge_insights.extraction.patterns import (
    ADDRESS_PATTERN,
    AddressExtractor,
    extract_addresses,
    find_addresses_in_text,
    is_valid_address,
)

__all__ = [
    "ADDRESS_PATTERN",
    "AddressExtractor",
    "extract_addresses",
    "find_addresses_in_text",
    "is_valid_address",
]
