"""Unified CLI entry point for Badge Insights.

Config precedence: settings.default.toml -> settings.local.toml -> env vars (INSIGHTS_* with double underscores) -> CLI flags.
"""

from __future__ import annotations

import typer

from badge_insights.cli.config_cmd import config_app
from badge_insights.cli.insights_cmd import insights, scan
from badge_insights.cli.settings_cmd import settings_app

try:
    from importlib.metadata import version

    VERSION = version("badge-insights")
except Exception:
    VERSION = "unknown"

APP_HELP = (
    "badge-insights — address insights for wallet signing and transaction payloads. "
    "Config precedence: settings.default.toml -> settings.local.toml -> env vars (INSIGHTS_* with __) -> CLI flags."
)

app = typer.Typer(add_completion=True, help=APP_HELP)

app.command("scan")(scan)
app.command("insights")(insights)
app.add_typer(config_app, name="config")
app.add_typer(settings_app, name="settings")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Root log level."),
) -> None:
    """Show help when no subcommand is provided."""
    if version:
        typer.echo(f"badge-insights {VERSION}")
        raise typer.Exit()

    from badge_insights.logging_setup import configure_logging

    configure_logging(log_level)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


if __name__ == "__main__":
    app()
