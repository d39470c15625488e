"""Terminal rendering of duplication alerts (rich)."""

from __future__ import annotations
from typing import Any, Dict, Iterable

from rich import box
from rich.console import Console
from rich.table import Table

TYPE_STYLE = {
    "exact": "bold red",
    "similar": "yellow",
    "potential": "cyan",
}


def alerts_table(rows: Iterable[Dict[str, Any]], title: str = "Duplication Alerts") -> Table:
    """Build a table from alert rows (AlertSink.alert_row / read_alerts shape)."""
    table = Table(title=title, box=box.SIMPLE_HEAVY, show_lines=False)
    table.add_column("Type", no_wrap=True)
    table.add_column("Confidence", justify="right")
    table.add_column("Original")
    table.add_column("Duplicate")
    table.add_column("J / C / St / Se", justify="right", no_wrap=True)
    table.add_column("Created", no_wrap=True)
    for r in rows:
        typ = r.get("type", "")
        table.add_row(
            f"[{TYPE_STYLE.get(typ, 'white')}]{typ.upper()}[/]",
            f"{float(r.get('confidence', 0.0)) * 100:.1f}%",
            str(r.get("original_dataset_name") or r.get("original_dataset_id", "")),
            str(r.get("duplicate_dataset_name") or r.get("duplicate_dataset_id", "")),
            f"{r.get('jaccard', 0.0):.2f} / {r.get('cosine', 0.0):.2f} / "
            f"{r.get('structural', 0.0):.2f} / {r.get('semantic', 0.0):.2f}",
            str(r.get("created_at", ""))[:19],
        )
    return table


def render_alerts(rows: Iterable[Dict[str, Any]], console: Console | None = None, title: str = "Duplication Alerts") -> None:
    rows = list(rows)
    console = console or Console()
    if not rows:
        console.print("[green]No duplication alerts.[/green]")
        return
    console.print(alerts_table(rows, title=title))
