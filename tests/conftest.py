"""Shared pytest fixtures."""

from __future__ import annotations

from datetime import datetime

import pytest

from hubsync.config import HubsyncConfig
from hubsync.engine import HubEngine
from hubsync.models import NoteMetadata
from hubsync.parse.frontmatter import build_metadata
from hubsync.store import ChangeCallback, ChangeEvent, ContentStore, Subscription

HUB_TEMPLATE = """---
type: moc
hubsync:
  auto_gather_seeds: true
  seed_tags: [creativity]
  update_frequency: {frequency}
---
# Creativity

Intro written by hand.

## Gathered
<!-- BEGIN AUTO -->{region}<!-- END AUTO -->

## Notes
Manual footer with [[Manual Link]].
"""


class MemoryStore(ContentStore):
    """In-memory content store with a logical modification clock."""

    def __init__(self) -> None:
        self.docs: dict[str, str] = {}
        self.mtimes: dict[str, float] = {}
        self.ctimes: dict[str, float] = {}
        self.writes: list[str] = []
        self.reads: list[str] = []
        self.fail_reads: set[str] = set()
        self.fail_writes: set[str] = set()
        self.callbacks: list[ChangeCallback] = []
        self._tick = 0.0

    def _touch(self, path: str) -> None:
        self._tick += 1.0
        self.mtimes[path] = self._tick

    def add(self, path: str, text: str, created_at: float | None = None) -> None:
        self.docs[path] = text
        self._touch(path)
        self.ctimes[path] = created_at if created_at is not None else self._tick

    def _require(self, path: str) -> None:
        if path not in self.docs:
            raise FileNotFoundError(f"No such document: '{path}'")

    async def read(self, path: str) -> str:
        self._require(path)
        if path in self.fail_reads:
            raise OSError(f"simulated read failure: '{path}'")
        self.reads.append(path)
        return self.docs[path]

    async def write(self, path: str, text: str) -> None:
        if path in self.fail_writes:
            raise OSError(f"simulated write failure: '{path}'")
        self.docs[path] = text
        self._touch(path)
        self.writes.append(path)

    def mtime(self, path: str) -> float:
        self._require(path)
        return self.mtimes[path]

    def created_at(self, path: str) -> float:
        self._require(path)
        return self.ctimes[path]

    def list_documents(self) -> list[str]:
        return sorted(self.docs)

    def metadata(self, path: str) -> NoteMetadata:
        self._require(path)
        return build_metadata(self.docs[path])

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        self.callbacks.append(callback)
        return Subscription(lambda: self.callbacks.remove(callback))

    def emit(self, kind: str, path: str) -> None:
        for callback in list(self.callbacks):
            callback(ChangeEvent(kind=kind, path=path))


class FakeClock:
    """Callable clock starting at local noon on 2026-10-01."""

    def __init__(self) -> None:
        self.now = datetime(2026, 10, 1, 12, 0, 0).timestamp()

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifications() -> list[str]:
    return []


@pytest.fixture
def engine(store: MemoryStore, clock: FakeClock, notifications: list[str]) -> HubEngine:
    return HubEngine(store, HubsyncConfig(), notifier=notifications.append, clock=clock)


@pytest.fixture
def hub_text():
    """Factory for a living hub document."""

    def _make(frequency: str = "realtime", region: str = "\n") -> str:
        return HUB_TEMPLATE.format(frequency=frequency, region=region)

    return _make


@pytest.fixture
def seed_text():
    """Factory for a seed note with frontmatter tags."""

    def _make(body: str, tags: tuple[str, ...] = ("seed", "creativity")) -> str:
        return f"---\ntags: [{', '.join(tags)}]\n---\n{body}\n"

    return _make
