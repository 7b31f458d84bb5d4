"""Debounced reaction to content-store change events.

Each create/modify event for a seed note (re)starts a per-path timer. When a
timer fires, every living hub with ``immediate`` frequency is updated without
user notifications. Repeated saves of the same note within the debounce
window therefore cause a single update round.
"""

from __future__ import annotations

import asyncio

from hubsync.errors import HubsyncError
from hubsync.log import get_logger
from hubsync.models import UpdateFrequency, UpdateOptions
from hubsync.scheduler import UpdateScheduler
from hubsync.seeds import SeedIndex
from hubsync.store import ChangeEvent, ContentStore, Subscription

log = get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 5.0


class ChangeWatcher:
    """Subscribes to a store and drives immediate-mode hub updates."""

    def __init__(
        self,
        store: ContentStore,
        seed_index: SeedIndex,
        scheduler: UpdateScheduler,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self.store = store
        self.seed_index = seed_index
        self.scheduler = scheduler
        self.debounce_seconds = debounce_seconds
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task] = set()
        # Flushes for different seed paths must not patch the same hub at once.
        self._flush_lock = asyncio.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._subscription: Subscription | None = None

    @property
    def pending_paths(self) -> list[str]:
        return sorted(self._timers)

    @property
    def running(self) -> bool:
        return self._subscription is not None

    def start(self) -> None:
        """Subscribe to the store. Must be called from a running event loop."""
        if self._subscription is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._subscription = self.store.subscribe(self.handle_event)
        log.info("watch.started", debounce_seconds=self.debounce_seconds)

    def handle_event(self, event: ChangeEvent) -> None:
        """Restart the debounce timer for *event.path* if it is a seed note."""
        if self._loop is None or not event.path.endswith(".md"):
            return
        if not self.seed_index.has_seed_tag(event.path):
            return

        existing = self._timers.pop(event.path, None)
        if existing is not None:
            existing.cancel()
        self._timers[event.path] = self._loop.call_later(
            self.debounce_seconds, self._fire, event.path
        )
        log.debug("watch.debounced", path=event.path, kind=event.kind)

    def _fire(self, path: str) -> None:
        self._timers.pop(path, None)
        task = asyncio.ensure_future(self._flush(path))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _flush(self, seed_path: str) -> None:
        async with self._flush_lock:
            try:
                hubs = await self.scheduler.living_hubs(UpdateFrequency.IMMEDIATE)
            except (HubsyncError, OSError) as exc:
                log.error("watch.scan_failed", seed=seed_path, error=str(exc))
                return
            log.info("watch.flush", seed=seed_path, hubs=len(hubs))
            for hub in hubs:
                try:
                    await self.scheduler.update_one(hub.path, UpdateOptions(notify=False))
                except HubsyncError as exc:
                    log.warning("watch.update_failed", path=hub.path, error=str(exc))
                except Exception:
                    # One broken hub must not stop the rest of the round.
                    log.exception("watch.update_failed", path=hub.path)

    async def drain(self) -> None:
        """Wait for update rounds that have already started."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def dispose(self) -> None:
        """Cancel every pending timer and unsubscribe from the store.

        Update rounds already in flight are not interrupted.
        """
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        log.info("watch.stopped")
