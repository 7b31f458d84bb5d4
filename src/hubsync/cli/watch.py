"""hubsync watch: keep immediate-mode hubs updated while notes change.

Runs until interrupted (Ctrl+C). Saving a seed note restarts a debounce
timer; once the note has been quiet for the debounce period, every living hub
with ``update_frequency: realtime`` gathers new seeds.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Annotated

import typer

from hubsync.cli.common import DEFAULT_VAULT, VaultOption, console, open_engine
from hubsync.engine import HubEngine


def watch_cmd(
    vault: VaultOption = DEFAULT_VAULT,
    debounce: Annotated[
        float | None,
        typer.Option("--debounce", help="Quiet period in seconds before updating (overrides config)."),
    ] = None,
) -> None:
    """Watch the vault and update realtime hubs as seed notes change."""
    engine = open_engine(vault)
    if debounce is not None:
        if debounce < 0:
            console.print("[red]Error:[/] --debounce must be >= 0.")
            raise typer.Exit(1)
        engine.config.updater.debounce_seconds = debounce

    console.print(
        f"Watching [bold]{vault}[/] (debounce {engine.config.updater.debounce_seconds:g}s). "
        "Press Ctrl+C to stop."
    )
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_watch(engine))
    console.print("[dim]Stopped.[/]")


async def _watch(engine: HubEngine) -> None:
    watcher = engine.watch()
    try:
        await asyncio.Event().wait()
    finally:
        engine.close()
        await watcher.drain()
