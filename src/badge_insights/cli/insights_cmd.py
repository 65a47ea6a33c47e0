"""CLI commands that run the address pipeline over a payload file.

``scan`` only extracts addresses; ``insights`` runs the full
extract / verify / render pipeline against the configured rule store.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from badge_insights.ui import DisplayDocument, Panel

console = Console()


def _load_payload(source: str) -> Any:
    """Read JSON from a file path or an inline JSON string."""
    raw = Path(source).read_text(encoding="utf-8") if os.path.isfile(source) else source
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        console.print(f"[red]✗[/red] Not valid JSON: {exc}")
        raise typer.Exit(code=1)


def scan(
    source: str = typer.Argument(..., help="Path to a JSON payload file, or inline JSON."),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output results as JSON."),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", help="Override extraction.max_depth."),
) -> None:
    """List the addresses found in a payload."""
    from badge_insights.extraction import AddressExtractor

    payload = _load_payload(source)
    addresses = AddressExtractor(max_depth=max_depth).extract(payload)

    if json_output:
        console.print_json(json.dumps(addresses))
        return

    if not addresses:
        console.print("No addresses found")
        return

    table = Table(title="Addresses Found")
    table.add_column("#", style="dim", width=4)
    table.add_column("Address", style="green")
    for i, addr in enumerate(addresses, 1):
        table.add_row(str(i), addr)

    console.print(table)
    console.print(f"\n[bold]{len(addresses)}[/bold] address(es) found")


def insights(
    source: str = typer.Argument(..., help="Path to a JSON file holding a signature request (or transaction), or inline JSON."),
    transaction: bool = typer.Option(
        False, "--transaction", "-t", help="Treat the payload as a transaction instead of a signature request."
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output the display document as JSON."),
) -> None:
    """Run the full insight pipeline and print the resulting panel."""
    from badge_insights.exceptions import InsightsError

    payload = _load_payload(source)
    try:
        document = asyncio.run(_run_pipeline(payload, transaction=transaction))
    except InsightsError as exc:
        console.print(f"[red]✗[/red] {exc}")
        raise typer.Exit(code=1)

    if json_output:
        console.print_json(document.model_dump_json())
        return
    _print_panel(document.content)


async def _run_pipeline(payload: Any, *, transaction: bool) -> DisplayDocument:
    from badge_insights.snap import SnapHandlers
    from badge_insights.store import build_state_store
    from badge_insights.verification import OwnershipVerifier

    store = build_state_store()
    async with OwnershipVerifier() as verifier:
        handlers = SnapHandlers(store=store, verifier=verifier)
        if transaction:
            return await handlers.on_transaction(payload)
        if not isinstance(payload, dict):
            payload = {"data": payload}
        return await handlers.on_signature(payload)


def _print_panel(content: Panel) -> None:
    for component in content.children:
        if component.type == "heading":
            console.print(component.value, style="bold", markup=False)
        elif component.type == "divider":
            console.rule()
        elif component.type == "address":
            console.print(component.value, style="green", markup=False)
        else:
            console.print(component.value, markup=False)
