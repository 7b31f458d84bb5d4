"""Tests for hubsync update."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from hubsync.cli.main import app

runner = CliRunner()

HUB = "MOCs/Creativity.md"


def _hub_text(vault: Path) -> str:
    return (vault / HUB).read_text(encoding="utf-8")


def test_update_single_hub(vault: Path) -> None:
    result = runner.invoke(app, ["update", HUB, "--vault", str(vault)])

    assert result.exit_code == 0
    assert '1 new seed(s) added to "Creativity"' in result.output
    assert '- [[Idea]] - "A small idea about drawing every day." #creativity' in _hub_text(vault)
    assert "See [[Manual Link]]." in _hub_text(vault)


def test_update_dry_run_writes_nothing(vault: Path) -> None:
    before = _hub_text(vault)
    result = runner.invoke(app, ["update", HUB, "--vault", str(vault), "--dry-run"])

    assert result.exit_code == 0
    assert "Would add" in result.output
    assert _hub_text(vault) == before


def test_update_all_hubs(vault: Path) -> None:
    result = runner.invoke(app, ["update", "--vault", str(vault)])

    assert result.exit_code == 0
    assert "1 hub(s) gained 1 seed(s)" in result.output
    assert "[[Idea]]" in _hub_text(vault)


def test_update_non_living_hub(vault: Path) -> None:
    result = runner.invoke(app, ["update", "MOCs/Static.md", "--vault", str(vault)])
    assert result.exit_code == 0
    assert "Not a living hub" in result.output


def test_update_missing_region(vault: Path) -> None:
    (vault / HUB).write_text(
        _hub_text(vault).replace("<!-- END AUTO -->\n", ""), encoding="utf-8"
    )
    result = runner.invoke(app, ["update", HUB, "--vault", str(vault)])

    assert result.exit_code == 1
    assert "No managed region" in result.output


def test_update_all_reports_errors(vault: Path) -> None:
    (vault / HUB).write_text(
        _hub_text(vault).replace("<!-- BEGIN AUTO -->\n", ""), encoding="utf-8"
    )
    result = runner.invoke(app, ["update", "--vault", str(vault), "--force"])

    assert result.exit_code == 1
    assert "1 error(s)" in result.output


def test_update_missing_document(vault: Path) -> None:
    result = runner.invoke(app, ["update", "MOCs/Nope.md", "--vault", str(vault)])
    assert result.exit_code == 1
    assert "Document not found" in result.output
