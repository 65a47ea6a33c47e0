"""Command-line interface for Badge Insights."""
