"""Public facade wiring the parser, cache, matcher, patcher, ledger and watcher.

Usage:
    engine = HubEngine.for_vault(Path("~/notes").expanduser())
    hubs = await engine.detect()
    record = await engine.update_one("MOCs/Creativity.md", UpdateOptions(mode=UpdateFrequency.MANUAL))
    await engine.undo("MOCs/Creativity.md")
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

from hubsync.cache import ParseCache
from hubsync.config import HubsyncConfig, load_config
from hubsync.detector import HubDetector
from hubsync.errors import HubsyncError
from hubsync.history import HistoryLedger
from hubsync.log import get_logger
from hubsync.models import BatchResult, HubDocument, PatchRecord, UpdateOptions
from hubsync.patch import PatchEngine
from hubsync.scheduler import Notifier, UpdateScheduler
from hubsync.seeds import SeedIndex, SeedMatcher
from hubsync.store import ContentStore, FileSystemStore
from hubsync.watcher import ChangeWatcher

log = get_logger(__name__)


class HubEngine:
    """Single entry point for detecting, updating and rolling back hubs."""

    def __init__(
        self,
        store: ContentStore,
        config: HubsyncConfig | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.config = config or HubsyncConfig()
        markers = self.config.markers.to_markers()

        self.detector = HubDetector(
            store,
            options=self.config.detection,
            markers=markers,
            namespace=self.config.living.namespace,
        )
        self.cache = ParseCache(
            self.detector, ttl_seconds=self.config.updater.cache_ttl_seconds, clock=clock
        )
        self.seed_index = SeedIndex(store, default_tags=self.config.living.seed_tags, clock=clock)
        self.matcher = SeedMatcher(self.seed_index)
        self.patcher = PatchEngine(
            store,
            markers=markers,
            boilerplate_tags=self.config.living.boilerplate_tags,
            excerpt_length=self.config.living.excerpt_length,
        )
        self.ledger = HistoryLedger(store, markers=markers, max_entries=self.config.updater.max_history)
        self.scheduler = UpdateScheduler(
            self.detector,
            self.cache,
            self.matcher,
            self.patcher,
            self.ledger,
            notifier=notifier,
            clock=clock,
        )
        self._watcher: ChangeWatcher | None = None

    @classmethod
    def for_vault(
        cls,
        vault: Path,
        config: HubsyncConfig | None = None,
        notifier: Notifier | None = None,
    ) -> HubEngine:
        """Engine over a file-system vault, loading ``hubsync.yaml`` from it."""
        cfg = config if config is not None else load_config(vault)
        return cls(FileSystemStore(vault), cfg, notifier=notifier)

    async def detect(self) -> list[HubDocument]:
        """Parse every hub in the store; unreadable hubs are logged and skipped."""
        hubs: list[HubDocument] = []
        for path in self.detector.hub_paths():
            try:
                hubs.append(await self.cache.get(path))
            except HubsyncError as exc:
                log.warning("hub.parse_failed", path=path, error=str(exc))
        return hubs

    async def parse(self, path: str) -> HubDocument:
        return await self.cache.get(path)

    async def update_one(self, path: str, options: UpdateOptions | None = None) -> PatchRecord | None:
        return await self.scheduler.update_one(path, options)

    async def update_all(self, options: UpdateOptions | None = None) -> BatchResult:
        return await self.scheduler.update_all(options)

    async def undo(self, path: str) -> bool:
        undone = await self.ledger.undo(path)
        if undone:
            self.cache.clear(path)
        return undone

    def history(self, path: str | None = None, limit: int | None = None) -> list[PatchRecord]:
        return self.ledger.history(path, limit)

    def clear_cache(self, path: str | None = None) -> None:
        self.cache.clear(path)

    def watch(self) -> ChangeWatcher:
        """Start (or return the running) change watcher."""
        if self._watcher is None:
            self._watcher = ChangeWatcher(
                self.store,
                self.seed_index,
                self.scheduler,
                debounce_seconds=self.config.updater.debounce_seconds,
            )
        self._watcher.start()
        return self._watcher

    def close(self) -> None:
        if self._watcher is not None:
            self._watcher.dispose()
            self._watcher = None
