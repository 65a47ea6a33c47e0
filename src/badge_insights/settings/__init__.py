"""Settings package for Badge Insights."""

from badge_insights.settings.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
