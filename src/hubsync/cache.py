"""Parse cache for hub documents.

An entry is served only while it is younger than the TTL *and* the document's
modification time still equals the one recorded at parse time. Anything else
is reparsed transparently. Entries live in process memory only.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from hubsync.detector import HubDetector
from hubsync.errors import DocumentIOError
from hubsync.log import get_logger
from hubsync.models import CacheEntry, HubDocument

log = get_logger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


class ParseCache:
    """Memoizes ``HubDetector.parse`` keyed by document path."""

    def __init__(
        self,
        detector: HubDetector,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.detector = detector
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    async def get(self, path: str) -> HubDocument:
        """Return a fresh parse of *path*, from cache when still valid."""
        try:
            current_mtime = self.detector.store.mtime(path)
        except OSError as exc:
            self._entries.pop(path, None)
            raise DocumentIOError(path, "stat", exc) from exc

        entry = self._entries.get(path)
        if entry is not None:
            age = self._clock() - entry.cached_at
            if age <= self.ttl_seconds and entry.source_mod_time == current_mtime:
                return entry.document
            log.debug("cache.stale", path=path, age=round(age, 3))
            del self._entries[path]

        document = await self.detector.parse(path)
        self._entries[path] = CacheEntry(
            document=document,
            cached_at=self._clock(),
            source_mod_time=document.modified_at,
        )
        return document

    def clear(self, path: str | None = None) -> None:
        """Drop one entry, or every entry when *path* is None."""
        if path is None:
            self._entries.clear()
        else:
            self._entries.pop(path, None)
