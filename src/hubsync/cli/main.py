"""hubsync CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from hubsync.cli.detect import detect_cmd
from hubsync.cli.show import show_cmd
from hubsync.cli.update import update_cmd
from hubsync.cli.watch import watch_cmd


def _version() -> str:
    try:
        return importlib.metadata.version("hubsync")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"hubsync {_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="hubsync",
    help=(
        "hubsync: keep hub documents in sync with new seed notes.\n\n"
        "  hubsync detect   List hub documents.\n"
        "  hubsync update   Gather new seeds into living hubs.\n"
        "  hubsync watch    Update realtime hubs as notes change."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """hubsync: keep hub documents in sync with new seed notes."""


app.command("detect")(detect_cmd)
app.command("show")(show_cmd)
app.command("update")(update_cmd)
app.command("watch")(watch_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed hubsync version."""
    typer.echo(f"hubsync {_version()}")


if __name__ == "__main__":
    app()
