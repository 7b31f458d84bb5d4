"""Fixtures for CLI tests: a small vault on disk."""

from __future__ import annotations

from pathlib import Path

import pytest

LIVING_HUB = """---
type: moc
hubsync:
  auto_gather_seeds: true
  seed_tags: [creativity]
  update_frequency: daily
---
# Creativity

## Gathered
<!-- BEGIN AUTO -->
<!-- END AUTO -->

## Notes
See [[Manual Link]].
"""

STATIC_HUB = """---
type: moc
---
# Static
[[Somewhere]]
"""

SEED = """---
tags: [seed, creativity]
---
A small idea about drawing every day.
"""


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    (tmp_path / "MOCs").mkdir()
    (tmp_path / "Seeds").mkdir()
    (tmp_path / "MOCs" / "Creativity.md").write_text(LIVING_HUB, encoding="utf-8")
    (tmp_path / "MOCs" / "Static.md").write_text(STATIC_HUB, encoding="utf-8")
    (tmp_path / "Seeds" / "Idea.md").write_text(SEED, encoding="utf-8")
    return tmp_path
