"""Badge Insights — address insights and ownership checks for wallet signing payloads."""

from __future__ import annotations

try:
    from importlib.metadata import version

    __version__ = version("badge-insights")
except Exception:
    __version__ = "0.0.0"
