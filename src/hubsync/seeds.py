"""Seed note index and matcher.

``SeedIndex.gather`` snapshots every document whose tags intersect a tag set,
with optional date filtering and backlinks.
``SeedMatcher.find`` narrows that to seeds a given hub does not link yet,
newest first. That order is relied on by the patch engine.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from datetime import date, datetime
from pathlib import PurePosixPath

from hubsync.errors import DocumentIOError
from hubsync.log import get_logger
from hubsync.models import DateFilter, HubDocument, SeedGatherResult, SeedNote
from hubsync.parse.frontmatter import normalize_tag, split_frontmatter
from hubsync.parse.links import split_link
from hubsync.store import ContentStore

log = get_logger(__name__)

DEFAULT_SEED_TAGS: tuple[str, ...] = ("seed", "hub-seed")
EXCERPT_MAX_LENGTH = 150
DAY_SECONDS = 24 * 60 * 60

_SORT_KEYS = ("created", "modified", "title")

_HEADING_LINE_RE = re.compile(r"^#+\s+.+$", re.MULTILINE)
_WIKILINK_RE = re.compile(r"!?\[\[([^\]]+)\]\]")
_INLINE_TAG_RE = re.compile(r"#[\w/-]+")
_WS_RE = re.compile(r"\s+")


def create_excerpt(content: str, max_length: int = EXCERPT_MAX_LENGTH) -> str:
    """Plain-text preview: no frontmatter, headings, link brackets or tags."""
    _, body, _ = split_frontmatter(content)
    text = _HEADING_LINE_RE.sub("", body)
    text = _WIKILINK_RE.sub(lambda m: m.group(1).split("|")[-1], text)
    text = _INLINE_TAG_RE.sub("", text)
    text = _WS_RE.sub(" ", text).strip()
    if len(text) > max_length:
        text = text[:max_length].strip() + "..."
    return text


def _normalize_tags(tags) -> frozenset[str]:
    return frozenset(t for t in (normalize_tag(tag) for tag in tags) if t)


def frontmatter_timestamp(value) -> float | None:
    """POSIX time of a frontmatter ``created`` value, or None if unusable.

    Accepts YAML dates and datetimes and ISO 8601 strings. Naive values are
    local time.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time()).timestamp()
    return None


def date_window(date_filter: DateFilter, now: float) -> tuple[float, float] | None:
    """``(start, end)`` creation-time bounds for *date_filter*; None means no bound."""
    if date_filter is DateFilter.TODAY:
        midnight = datetime.fromtimestamp(now).replace(hour=0, minute=0, second=0, microsecond=0)
        return midnight.timestamp(), now
    if date_filter is DateFilter.WEEK:
        return now - 7 * DAY_SECONDS, now
    if date_filter is DateFilter.MONTH:
        return now - 30 * DAY_SECONDS, now
    return None


class SeedIndex:
    """Seed lookup over a content store's metadata index."""

    def __init__(
        self,
        store: ContentStore,
        default_tags: tuple[str, ...] | list[str] = DEFAULT_SEED_TAGS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.default_tags = _normalize_tags(default_tags)
        self._clock = clock

    def has_seed_tag(self, path: str, tags=None) -> bool:
        """Cheap check against the metadata index; never reads the full note."""
        target = _normalize_tags(tags) if tags else self.default_tags
        try:
            meta = self.store.metadata(path)
        except OSError:
            return False
        return not target.isdisjoint(meta.tags)

    def backlinks(self) -> dict[str, set[str]]:
        """Map each link target (as written, without heading or alias) to the
        documents linking to it. Built from the metadata index only."""
        targets: dict[str, set[str]] = {}
        for path in self.store.list_documents():
            try:
                meta = self.store.metadata(path)
            except OSError:
                continue
            for occurrence in meta.links:
                target, _ = split_link(occurrence.link)
                targets.setdefault(target.strip(), set()).add(path)
        return targets

    async def gather(
        self,
        tags=None,
        sort_by: str = "created",
        sort_order: str = "desc",
        limit: int | None = None,
        date_filter: DateFilter | str = DateFilter.ALL,
    ) -> SeedGatherResult:
        """Collect seed snapshots whose tags intersect *tags*.

        Args:
            tags: Tags to match (case-insensitive, leading ``#`` ignored).
                Falls back to the index's default seed tags when empty.
            sort_by: ``created``, ``modified`` or ``title``.
            sort_order: ``asc`` or ``desc``.
            limit: Maximum number of seeds to return.
            date_filter: ``all``, ``today``, ``week`` or ``month``; keeps
                seeds created inside that window.

        A frontmatter ``created`` field overrides the store's creation time.

        Raises:
            ValueError: On an unknown *sort_by*, *sort_order* or *date_filter*.
            DocumentIOError: If a matching note cannot be read.
        """
        if sort_by not in _SORT_KEYS:
            raise ValueError(f"sort_by must be one of {_SORT_KEYS}, got '{sort_by}'")
        if sort_order not in ("asc", "desc"):
            raise ValueError(f"sort_order must be 'asc' or 'desc', got '{sort_order}'")
        window = date_window(DateFilter(date_filter), self._clock())

        target = _normalize_tags(tags) if tags else self.default_tags
        linked_from = self.backlinks()

        seeds: list[SeedNote] = []
        for path in self.store.list_documents():
            try:
                meta = self.store.metadata(path)
            except OSError as exc:
                log.warning("seed.index_failed", path=path, error=str(exc))
                continue
            if target.isdisjoint(meta.tags):
                continue
            try:
                content = await self.store.read(path)
                created_at = frontmatter_timestamp(meta.frontmatter.get("created"))
                if created_at is None:
                    created_at = self.store.created_at(path)
                modified_at = self.store.mtime(path)
            except OSError as exc:
                raise DocumentIOError(path, "read", exc) from exc

            stem = PurePosixPath(path)
            referrers = set()
            for key in (str(stem.with_suffix("")), stem.stem):
                referrers |= linked_from.get(key, set())
            referrers.discard(path)

            seeds.append(
                SeedNote(
                    path=path,
                    title=stem.stem,
                    tags=meta.tags,
                    created_at=created_at,
                    excerpt=create_excerpt(content),
                    modified_at=modified_at,
                    backlinks=tuple(sorted(referrers)),
                )
            )

        total_count = len(seeds)
        if window is not None:
            start, end = window
            seeds = [s for s in seeds if start <= s.created_at <= end]
        filtered_count = len(seeds)

        if sort_by == "title":
            seeds.sort(key=lambda s: s.title.lower(), reverse=sort_order == "desc")
        elif sort_by == "modified":
            seeds.sort(key=lambda s: s.modified_at, reverse=sort_order == "desc")
        else:
            seeds.sort(key=lambda s: s.created_at, reverse=sort_order == "desc")

        if limit and limit > 0:
            seeds = seeds[:limit]
        return SeedGatherResult(
            seeds=seeds, total_count=total_count, filtered_count=filtered_count, tags=target
        )

    async def query(
        self,
        tags=None,
        sort_by: str = "created",
        sort_order: str = "desc",
        limit: int | None = None,
        date_filter: DateFilter | str = DateFilter.ALL,
    ) -> list[SeedNote]:
        """The ``seeds`` of :meth:`gather`."""
        result = await self.gather(tags, sort_by, sort_order, limit, date_filter)
        return result.seeds


def _link_keys(seed: SeedNote) -> set[str]:
    path = PurePosixPath(seed.path)
    return {seed.path, str(path.with_suffix("")), path.stem}


class SeedMatcher:
    """Finds seeds a living hub should gather but does not link yet."""

    def __init__(self, index: SeedIndex) -> None:
        self.index = index

    async def find(self, hub: HubDocument, since: float | None = None) -> list[SeedNote]:
        """Return unlinked seeds matching ``hub.seed_tags``, newest first.

        Args:
            hub: Parsed living hub.
            since: Incremental floor; seeds created strictly before it are
                skipped. ``None`` or ``0`` means no floor.
        """
        hub_tags = {t.lower() for t in hub.seed_tags}
        if not hub_tags:
            return []

        candidates = await self.index.query(tags=hub_tags, sort_by="created", sort_order="desc")
        linked = {link.target_path for link in hub.region_links}

        matches: list[SeedNote] = []
        for seed in candidates:
            if seed.path == hub.path:
                continue
            if linked & _link_keys(seed):
                continue
            if since and seed.created_at < since:
                continue
            if hub_tags.isdisjoint(t.lower() for t in seed.tags):
                continue
            matches.append(seed)

        matches.sort(key=lambda s: s.created_at, reverse=True)
        return matches
