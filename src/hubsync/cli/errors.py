"""hubsync rich error messages: actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from hubsync.cli.errors import err_no_vault
    console.print(err_no_vault("~/notes"))
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_no_vault(vault: str) -> str:
    """Vault directory does not exist."""
    return (
        f"[red]Error:[/] Vault directory not found: '{vault}'\n"
        "  Pass an existing directory:  --vault <path>"
    )


def err_config(message: str) -> str:
    """hubsync.yaml (or the global config) holds an invalid value."""
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {message}\n"
        "  Fix hubsync.yaml in the vault root or ~/.hubsync/config.yaml."
    )


def err_document_not_found(path: str) -> str:
    """Requested document is not in the vault."""
    return (
        f"[red]Error:[/] Document not found: '{path}'\n"
        "  Use a path relative to the vault root. Run:  hubsync detect"
    )


def err_missing_region(path: str, begin: str, end: str) -> str:
    """Living hub has no managed region."""
    return (
        f"[red]Error:[/] No managed region in '{path}'.\n"
        "  Add both markers where new seeds should go:\n"
        f"    {begin}\n"
        f"    {end}"
    )


def err_update_failed(path: str, message: str) -> str:
    """A single hub failed to update."""
    return f"[red]✗[/] {path}: {message}"


def warn_not_living(path: str, namespace: str) -> str:
    """Hub exists but has no living configuration."""
    return (
        f"[yellow]Not a living hub:[/] '{path}'\n"
        f"  Add to its frontmatter:\n"
        f"    {namespace}:\n"
        "      auto_gather_seeds: true\n"
        "      seed_tags: [<tag>]"
    )


def warn_no_hubs() -> str:
    """No hub documents detected."""
    return (
        "[yellow]No hub documents found.[/]\n"
        "  Mark a note with 'type: moc' in its frontmatter, a #moc tag,\n"
        "  or place it in a MOCs/ folder."
    )
