"""Shared CLI plumbing: vault option, engine construction, notifications."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from hubsync.cli.errors import err_config, err_no_vault
from hubsync.config import ConfigError, load_config
from hubsync.engine import HubEngine
from hubsync.log import configure_logging

console = Console()

VaultOption = Annotated[
    Path,
    typer.Option("--vault", "-v", help="Vault root directory (default: current directory)."),
]

DEFAULT_VAULT = Path(".")


def open_engine(vault: Path) -> HubEngine:
    """Load config from *vault*, configure logging and build the engine.

    Exits with code 1 (after printing an actionable message) if the vault is
    missing or its configuration is invalid.
    """
    if not vault.is_dir():
        console.print(err_no_vault(str(vault)))
        raise typer.Exit(1)
    try:
        cfg = load_config(vault)
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)

    configure_logging(cfg.logging.level, cfg.logging.format)
    return HubEngine.for_vault(vault, cfg, notifier=notify)


def notify(message: str) -> None:
    console.print(f"[green]✓[/] {message}")
