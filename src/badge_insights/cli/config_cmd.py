"""CLI commands for the stored expected-balance configuration."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

config_app = typer.Typer(help="Read and replace the stored expected-balance rules.")
console = Console()


async def _rpc(request: dict[str, Any]) -> Any:
    from badge_insights.snap import SnapHandlers
    from badge_insights.store import build_state_store
    from badge_insights.verification import OwnershipVerifier

    async with OwnershipVerifier() as verifier:
        handlers = SnapHandlers(store=build_state_store(), verifier=verifier)
        return await handlers.on_rpc_request(request)


@config_app.command("get")
def get_config() -> None:
    """Print the stored configuration as JSON."""
    from badge_insights.exceptions import InsightsError

    try:
        state = asyncio.run(_rpc({"method": "get_expected"}))
    except InsightsError as exc:
        console.print(f"[red]✗[/red] {exc}")
        raise typer.Exit(code=1)
    console.print_json(json.dumps(state))


@config_app.command("set")
def set_config(
    input_file: Path = typer.Argument(..., help="JSON file with an 'expectedBalances' array."),
) -> None:
    """Replace the stored configuration with the contents of INPUT_FILE."""
    from badge_insights.exceptions import InsightsError

    if not input_file.is_file():
        console.print(f"[red]✗[/red] File not found: {input_file}")
        raise typer.Exit(code=1)

    try:
        params = json.loads(input_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        console.print(f"[red]✗[/red] Not valid JSON: {exc}")
        raise typer.Exit(code=1)

    try:
        asyncio.run(_rpc({"method": "set_expected", "params": params}))
    except InsightsError as exc:
        console.print(f"[red]✗[/red] {exc}")
        raise typer.Exit(code=1)

    count = len(params.get("expectedBalances") or []) if isinstance(params, dict) else 0
    console.print(f"[green]✓[/green] Stored {count} rule(s)")


@config_app.command("clear")
def clear_config() -> None:
    """Remove the stored configuration."""
    from badge_insights.exceptions import InsightsError
    from badge_insights.store import build_state_store

    try:
        build_state_store().clear()
    except InsightsError as exc:
        console.print(f"[red]✗[/red] {exc}")
        raise typer.Exit(code=1)
    console.print("[green]✓[/green] Configuration cleared")
