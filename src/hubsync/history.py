"""Bounded per-hub undo history and last-update bookkeeping."""

from __future__ import annotations

from hubsync.errors import DocumentIOError, MissingRegionError
from hubsync.log import get_logger
from hubsync.models import PatchRecord
from hubsync.parse.region import Markers, locate_region, splice_region
from hubsync.store import ContentStore

log = get_logger(__name__)

MAX_HISTORY_PER_HUB = 10


class HistoryLedger:
    """Owns the patch records and last-update timestamps of every hub.

    Records are kept newest first, at most ``max_entries`` per hub path.
    """

    def __init__(
        self,
        store: ContentStore,
        markers: Markers | None = None,
        max_entries: int = MAX_HISTORY_PER_HUB,
    ) -> None:
        self.store = store
        self.markers = markers or Markers()
        self.max_entries = max_entries
        self._records: dict[str, list[PatchRecord]] = {}
        self._last_update: dict[str, float] = {}

    # ------------------------------------------------------------------
    # Last-update timestamps
    # ------------------------------------------------------------------

    def last_update(self, path: str) -> float | None:
        return self._last_update.get(path)

    def mark_updated(self, path: str, timestamp: float) -> None:
        self._last_update[path] = timestamp

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def push(self, path: str, record: PatchRecord) -> None:
        """Prepend *record*; the oldest records beyond the bound are evicted."""
        records = self._records.setdefault(path, [])
        records.insert(0, record)
        del records[self.max_entries :]

    def history(self, path: str | None = None, limit: int | None = None) -> list[PatchRecord]:
        """Records for one hub, or for all hubs sorted newest first."""
        if path is not None:
            records = list(self._records.get(path, []))
        else:
            records = [r for rs in self._records.values() for r in rs]
            records.sort(key=lambda r: r.timestamp, reverse=True)
        return records[:limit] if limit else records

    def clear(self, path: str | None = None) -> None:
        if path is None:
            self._records.clear()
            self._last_update.clear()
        else:
            self._records.pop(path, None)
            self._last_update.pop(path, None)

    async def undo(self, path: str) -> bool:
        """Restore the region text saved by the most recent record of *path*.

        The region is located again in the current text, so edits made around
        it since the patch are preserved.

        Returns:
            False if there is no history for *path*, True once restored.

        Raises:
            MissingRegionError: The markers were removed since the patch; the
                record is kept.
            DocumentIOError: Reading or writing the hub failed.
        """
        records = self._records.get(path)
        if not records:
            return False

        record = records[0]
        try:
            content = await self.store.read(path)
        except OSError as exc:
            raise DocumentIOError(path, "read", exc) from exc

        region = locate_region(content, self.markers)
        if region is None:
            raise MissingRegionError(path, self.markers.begin, self.markers.end)

        restored = splice_region(content, region, record.previous_region_text)
        try:
            await self.store.write(path, restored)
        except OSError as exc:
            raise DocumentIOError(path, "write", exc) from exc

        records.pop(0)
        if records:
            self._last_update[path] = records[0].timestamp
        else:
            self._records.pop(path, None)
            self._last_update.pop(path, None)

        log.info("hub.undone", path=path, removed=len(record.added_seed_paths))
        return True
