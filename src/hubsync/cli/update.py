"""hubsync update: gather new seeds into living hubs.

Usage:
  hubsync update                       # every living hub, frequency rules apply
  hubsync update MOCs/Creativity.md    # one hub, explicit trigger
  hubsync update --dry-run             # show what would be added
  hubsync update --force               # ignore daily/manual frequency rules
"""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from hubsync.cli.common import DEFAULT_VAULT, VaultOption, console, open_engine
from hubsync.cli.errors import (
    err_document_not_found,
    err_missing_region,
    err_update_failed,
    warn_not_living,
)
from hubsync.engine import HubEngine
from hubsync.errors import HubsyncError, MissingRegionError
from hubsync.models import BatchResult, PatchRecord, UpdateFrequency, UpdateOptions


def update_cmd(
    path: Annotated[
        str | None,
        typer.Argument(help="Hub path relative to the vault root. Omit to update all living hubs."),
    ] = None,
    vault: VaultOption = DEFAULT_VAULT,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Ignore the hub's update frequency."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show the seeds that would be added; write nothing."),
    ] = False,
) -> None:
    """Add new matching seed notes to the managed region of living hubs."""
    engine = open_engine(vault)

    if path is None:
        result = asyncio.run(engine.update_all(UpdateOptions(force=force, dry_run=dry_run)))
        _print_batch(result, dry_run)
        raise typer.Exit(0 if result.success else 1)

    if not (vault / path).is_file():
        console.print(err_document_not_found(path))
        raise typer.Exit(1)

    # Naming a hub on the command line is an explicit trigger.
    options = UpdateOptions(
        force=force, dry_run=dry_run, mode=UpdateFrequency.MANUAL, notify=not dry_run
    )
    try:
        record = asyncio.run(_update_single(engine, path, options))
    except MissingRegionError:
        markers = engine.config.markers
        console.print(err_missing_region(path, markers.begin, markers.end))
        raise typer.Exit(1)
    except HubsyncError as exc:
        console.print(err_update_failed(path, str(exc)))
        raise typer.Exit(1)

    if record is None:
        console.print(f"[dim]No new seeds for {escape(path)}.[/]")
        return
    if dry_run:
        _print_records([record], title="Would add")


async def _update_single(engine: HubEngine, path: str, options: UpdateOptions) -> PatchRecord | None:
    hub = await engine.parse(path)
    if not hub.is_living:
        console.print(warn_not_living(path, engine.config.living.namespace))
        return None
    return await engine.update_one(path, options)


def _print_records(records: list[PatchRecord], title: str) -> None:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Hub", style="bold")
    table.add_column("Seeds")
    for record in records:
        table.add_row(escape(record.hub_path), escape("\n".join(record.added_seed_paths)))
    console.print(table)


def _print_batch(result: BatchResult, dry_run: bool) -> None:
    if result.records:
        _print_records(result.records, title="Would add" if dry_run else "Updated hubs")
    for error in result.errors:
        console.print(err_update_failed(escape(error.path), escape(error.message)))

    verb = "would gain" if dry_run else "gained"
    console.print(
        f"\n  {result.updated_count} hub(s) {verb} {result.seeds_added_count} seed(s)"
        + (f"  |  [red]{len(result.errors)} error(s)[/]" if result.errors else "")
    )
