"""Tests for hubsync show."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from hubsync.cli.main import app

runner = CliRunner()


def test_show_outline_and_region(vault: Path) -> None:
    result = runner.invoke(app, ["show", "MOCs/Creativity.md", "--vault", str(vault)])
    assert result.exit_code == 0
    assert "## Gathered" in result.output
    assert "[[Manual Link]]" in result.output
    assert "Links: 1 (0 in managed region)" in result.output


def test_show_hub_without_region(vault: Path) -> None:
    result = runner.invoke(app, ["show", "MOCs/Static.md", "--vault", str(vault)])
    assert result.exit_code == 0
    assert "Managed region: none" in result.output


def test_show_missing_document(vault: Path) -> None:
    result = runner.invoke(app, ["show", "MOCs/Nope.md", "--vault", str(vault)])
    assert result.exit_code == 1
    assert "Document not found" in result.output
