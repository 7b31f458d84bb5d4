"""Managed-region patch engine.

Non-destructive update of a hub document:

    [manual content before markers]          ← untouched
    <!-- BEGIN AUTO -->
    - [[2026-10-02 Idea]] - "newest..." #creativity     ← new lines first
    - [[2026-10-01 Idea]] - "older..." #practice        ← existing list items
    <!-- END AUTO -->
    [manual content after markers]           ← untouched

Only the text between the markers is rewritten, in a single write.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from hubsync.errors import DocumentIOError, MissingRegionError
from hubsync.log import get_logger
from hubsync.models import HubDocument, PatchResult, SeedNote
from hubsync.parse.region import Markers, locate_region, splice_region
from hubsync.store import ContentStore

log = get_logger(__name__)

DEFAULT_BOILERPLATE_TAGS: frozenset[str] = frozenset(["seed", "moc"])
DEFAULT_EXCERPT_LENGTH = 60

_LIST_ITEM_RE = re.compile(r"^[-*+]\s")


def format_seed_line(
    seed: SeedNote,
    boilerplate_tags: Iterable[str] = DEFAULT_BOILERPLATE_TAGS,
    excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
) -> str:
    """Format *seed* as ``- [[title]] - "excerpt" #tag1 #tag2``."""
    excerpt = seed.excerpt
    if len(excerpt) > excerpt_length:
        excerpt = excerpt[:excerpt_length] + "..."

    skip = {t.lower() for t in boilerplate_tags}
    tags = " ".join(f"#{tag}" for tag in sorted(seed.tags) if tag.lower() not in skip)

    line = f'- [[{seed.title}]] - "{excerpt}"'
    return f"{line} {tags}" if tags else line


def existing_list_items(region_text: str) -> list[str]:
    """List-item lines already in the region, stripped, in document order."""
    items = []
    for line in region_text.split("\n"):
        stripped = line.strip()
        if _LIST_ITEM_RE.match(stripped):
            items.append(stripped)
    return items


class PatchEngine:
    """Merges matched seeds into a hub's managed region and writes it back."""

    def __init__(
        self,
        store: ContentStore,
        markers: Markers | None = None,
        boilerplate_tags: Iterable[str] = DEFAULT_BOILERPLATE_TAGS,
        excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
    ) -> None:
        self.store = store
        self.markers = markers or Markers()
        self.boilerplate_tags = frozenset(t.lower() for t in boilerplate_tags)
        self.excerpt_length = excerpt_length

    async def apply(self, hub: HubDocument, seeds: list[SeedNote]) -> PatchResult:
        """Prepend one line per seed to the managed region of *hub*.

        *seeds* must already be newest first; their order is kept.

        Returns:
            Paths of the seeds actually added, and the region text as it was
            before the write (for undo).

        Raises:
            MissingRegionError: If the hub (or its current text) has no region.
            DocumentIOError: If reading or writing the hub fails.
        """
        if hub.region is None:
            raise MissingRegionError(hub.path, self.markers.begin, self.markers.end)

        try:
            content = await self.store.read(hub.path)
        except OSError as exc:
            raise DocumentIOError(hub.path, "read", exc) from exc

        # Offsets come from the text being rewritten, not from the parse.
        region = locate_region(content, self.markers)
        if region is None:
            raise MissingRegionError(hub.path, self.markers.begin, self.markers.end)

        previous = content[region.start : region.end]

        linked = {link.target_path for link in hub.region_links}
        fresh = [s for s in seeds if s.path not in linked and s.title not in linked]
        new_lines = [format_seed_line(s, self.boilerplate_tags, self.excerpt_length) for s in fresh]
        lines = new_lines + existing_list_items(previous)

        eol = "\r\n" if "\r\n" in content else "\n"
        replacement = eol + eol.join(lines) + eol if lines else ""
        updated = splice_region(content, region, replacement)

        try:
            await self.store.write(hub.path, updated)
        except OSError as exc:
            raise DocumentIOError(hub.path, "write", exc) from exc

        log.info("hub.patched", path=hub.path, added=len(fresh), kept=len(lines) - len(fresh))
        return PatchResult(added_paths=[s.path for s in fresh], previous_region_text=previous)
