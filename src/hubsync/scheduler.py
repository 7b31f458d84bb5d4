"""Update scheduling for living hubs.

Update modes:
  - immediate: updates whenever asked (driven by the change watcher)
  - daily:     at most once per local calendar day
  - manual:    only when an explicit trigger mode is passed

Each update gathers seeds created since the hub's last update, patches the
managed region and records the patch for undo.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime

from hubsync.cache import ParseCache
from hubsync.detector import HubDetector
from hubsync.errors import HubsyncError
from hubsync.history import HistoryLedger
from hubsync.log import get_logger
from hubsync.models import (
    BatchError,
    BatchResult,
    HubDocument,
    PatchRecord,
    UpdateFrequency,
    UpdateOptions,
)
from hubsync.patch import PatchEngine
from hubsync.seeds import SeedMatcher

log = get_logger(__name__)

VAULT_SCAN_PATH = "<vault-scan>"

Notifier = Callable[[str], None]


def same_local_day(a: float, b: float) -> bool:
    return datetime.fromtimestamp(a).date() == datetime.fromtimestamp(b).date()


class UpdateScheduler:
    """Applies frequency policy and orchestrates match → patch → record."""

    def __init__(
        self,
        detector: HubDetector,
        cache: ParseCache,
        matcher: SeedMatcher,
        engine: PatchEngine,
        ledger: HistoryLedger,
        notifier: Notifier | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.detector = detector
        self.cache = cache
        self.matcher = matcher
        self.engine = engine
        self.ledger = ledger
        self.notifier = notifier
        self._clock = clock

    def _gate_allows(self, hub: HubDocument, options: UpdateOptions) -> bool:
        if options.force:
            return True
        if hub.update_frequency is UpdateFrequency.DAILY:
            last = self.ledger.last_update(hub.path)
            return last is None or not same_local_day(last, self._clock())
        if hub.update_frequency is UpdateFrequency.MANUAL:
            return options.mode is not None
        return True

    async def update_one(self, path: str, options: UpdateOptions | None = None) -> PatchRecord | None:
        """Gather new seeds into one hub.

        Returns:
            The applied record, a prospective record for dry runs, or None when
            the hub is not living, the frequency gate says no, or nothing new
            matches.

        Raises:
            MissingRegionError: The living hub has no managed region.
            DocumentIOError: Reading or writing a document failed.
        """
        options = options or UpdateOptions()

        hub = await self.cache.get(path)
        if not hub.is_living:
            return None

        if not self._gate_allows(hub, options):
            log.debug("hub.skipped", path=path, frequency=hub.update_frequency.value)
            return None

        last = self.ledger.last_update(path)
        seeds = await self.matcher.find(hub, since=last or 0)
        if not seeds:
            return None

        mode = options.mode or hub.update_frequency

        if options.dry_run:
            return PatchRecord(
                hub_path=path,
                added_seed_paths=[s.path for s in seeds],
                timestamp=self._clock(),
                previous_region_text="",
                mode=mode,
            )

        result = await self.engine.apply(hub, seeds)
        self.cache.clear(path)

        record = PatchRecord(
            hub_path=path,
            added_seed_paths=result.added_paths,
            timestamp=self._clock(),
            previous_region_text=result.previous_region_text,
            mode=mode,
        )
        self.ledger.push(path, record)
        self.ledger.mark_updated(path, record.timestamp)

        log.info("hub.updated", path=path, seeds_added=len(record.added_seed_paths), mode=mode.value)
        if options.notify and self.notifier is not None:
            self.notifier(f'{len(record.added_seed_paths)} new seed(s) added to "{hub.title}"')
        return record

    async def living_hubs(self, frequency: UpdateFrequency | None = None) -> list[HubDocument]:
        """Parsed living hubs, optionally limited to one update frequency.

        Hubs that fail to parse are logged and left out.
        """
        hubs: list[HubDocument] = []
        for path in self.detector.hub_paths():
            try:
                hub = await self.cache.get(path)
            except HubsyncError as exc:
                log.warning("hub.parse_failed", path=path, error=str(exc))
                continue
            if hub.is_living and (frequency is None or hub.update_frequency is frequency):
                hubs.append(hub)
        return hubs

    async def update_all(self, options: UpdateOptions | None = None) -> BatchResult:
        """Update every living hub, one after another.

        A failing hub is recorded in ``errors`` and does not stop the batch.
        """
        result = BatchResult()

        try:
            paths = self.detector.hub_paths()
        except (HubsyncError, OSError) as exc:
            log.error("batch.scan_failed", error=str(exc))
            result.errors.append(BatchError(path=VAULT_SCAN_PATH, message=str(exc)))
            result.success = False
            return result

        for path in paths:
            try:
                hub = await self.cache.get(path)
                if not hub.is_living:
                    continue
                record = await self.update_one(path, options)
            except (HubsyncError, OSError) as exc:
                log.warning("batch.error", path=path, error=str(exc))
                result.errors.append(BatchError(path=path, message=str(exc)))
                continue

            if record is not None:
                result.records.append(record)
                result.updated_count += 1
                result.seeds_added_count += len(record.added_seed_paths)

        result.success = not result.errors
        log.info(
            "batch.done",
            updated=result.updated_count,
            seeds_added=result.seeds_added_count,
            errors=len(result.errors),
        )
        return result
