"""Console rendering for workbench outcomes."""

from __future__ import annotations

from typing import Iterable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from kcat_portal.interfaces.schemas import DisplayRecord, User
from kcat_portal.services.aggregator import DISPLAY_COLUMNS

console = Console()

_HEADERS = {
    "source": "Source",
    "ec_number": "EC number",
    "prot_id": "Protein ID",
    "substrate_name": "Substrate",
    "smiles": "SMILES",
    "temperature_celsius": "T (°C)",
    "formatted_kcat": "kcat (1/s)",
    "provenance": "Provenance",
}


def render_records(records: Iterable[DisplayRecord], *, title: str = "kcat results") -> None:
    records = list(records)
    if not records:
        console.print("[yellow]No matching records[/yellow]")
        return

    table = Table(title=title, show_lines=False)
    for column in DISPLAY_COLUMNS:
        table.add_column(_HEADERS[column], overflow="fold")
    for record in records:
        row = []
        for column in DISPLAY_COLUMNS:
            if column == "provenance":
                row.append(record.provenance_label)
                continue
            value = getattr(record, column)
            row.append("" if value is None else str(value))
        table.add_row(*row)
    console.print(table)


def render_error(message: str, *, title: Optional[str] = None) -> None:
    console.print(Panel(f"[red]{message}[/red]", title=title or "Error", border_style="red"))


def render_user(user: Optional[User]) -> None:
    if user is None:
        console.print("Not logged in")
        return
    email = user.email or "no email"
    console.print(f"Logged in as [bold]{user.username}[/bold] (id {user.id}, {email})")


__all__ = ["console", "render_error", "render_records", "render_user"]
