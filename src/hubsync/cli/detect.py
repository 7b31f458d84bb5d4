"""hubsync detect: list hub documents in a vault.

Usage:
  hubsync detect
  hubsync detect --vault ~/notes --living
"""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.table import Table

from hubsync.cli.common import DEFAULT_VAULT, VaultOption, console, open_engine
from hubsync.cli.errors import warn_no_hubs


def detect_cmd(
    vault: VaultOption = DEFAULT_VAULT,
    living: Annotated[
        bool,
        typer.Option("--living", help="Only show living hubs."),
    ] = False,
) -> None:
    """List hub documents with detection method and living configuration."""
    engine = open_engine(vault)
    hubs = asyncio.run(engine.detect())
    if living:
        hubs = [h for h in hubs if h.is_living]

    if not hubs:
        console.print(warn_no_hubs())
        raise typer.Exit(0)

    table = Table(title="Hub documents", show_header=True, header_style="bold")
    table.add_column("Path", style="bold")
    table.add_column("Detected by")
    table.add_column("Living")
    table.add_column("Frequency")
    table.add_column("Seed tags")
    table.add_column("Links", justify="right")
    table.add_column("Region")

    for hub in hubs:
        table.add_row(
            hub.path,
            hub.detection_method.value if hub.detection_method else "-",
            "[green]✓[/]" if hub.is_living else "[dim]-[/]",
            hub.update_frequency.value,
            ", ".join(sorted(hub.seed_tags)) or "-",
            str(len(hub.links)),
            "[green]✓[/]" if hub.region is not None else "[yellow]✗ missing[/]",
        )

    console.print(table)
    living_count = sum(1 for h in hubs if h.is_living)
    console.print(f"\n  {len(hubs)} hubs, {living_count} living")
