"""hubsync show: heading outline and links of one hub document."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.markup import escape
from rich.tree import Tree

from hubsync.cli.common import DEFAULT_VAULT, VaultOption, console, open_engine
from hubsync.cli.errors import err_document_not_found
from hubsync.errors import HubsyncError
from hubsync.models import Heading, HubDocument


def show_cmd(
    path: Annotated[
        str,
        typer.Argument(help="Hub path relative to the vault root (e.g. MOCs/Creativity.md)."),
    ],
    vault: VaultOption = DEFAULT_VAULT,
) -> None:
    """Show the heading tree and links of a hub document."""
    engine = open_engine(vault)
    if not (vault / path).is_file():
        console.print(err_document_not_found(path))
        raise typer.Exit(1)

    try:
        hub = asyncio.run(engine.parse(path))
    except HubsyncError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(1)

    console.print(_render(hub))
    region = (
        f"chars {hub.region.start}–{hub.region.end}" if hub.region is not None else "[yellow]none[/]"
    )
    console.print(f"\n  Managed region: {region}")
    console.print(
        f"  Links: {len(hub.links)} ({len(hub.region_links)} in managed region)"
    )


def _render(hub: HubDocument) -> Tree:
    tree = Tree(f"[bold]{escape(hub.title)}[/]")
    by_heading: dict[str | None, list[str]] = {}
    for link in hub.links:
        marker = " [cyan](auto)[/]" if link.in_region else ""
        label = link.target_path
        if link.display_text != link.target_path:
            label = f"{link.target_path}|{link.display_text}"
        by_heading.setdefault(link.heading, []).append(escape(f"[[{label}]]") + marker)

    for entry in by_heading.get(None, []):
        tree.add(entry)

    def _add(parent: Tree, heading: Heading) -> None:
        node = parent.add(escape(f"{'#' * heading.level} {heading.text}"))
        for entry in by_heading.pop(heading.text, []):
            node.add(entry)
        for child in heading.children:
            _add(node, child)

    for heading in hub.headings:
        _add(tree, heading)
    return tree
