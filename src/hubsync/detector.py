"""Hub document detection and parsing.

Detection methods, in priority order (first match wins):
  1. Frontmatter field:  type: moc
  2. Tag:                #moc inline, or ``tags: [moc]`` / ``tag: moc``
  3. Folder pattern:     path contains "MOCs/", "Maps/", ... (exclude wins)

Living configuration lives under a namespaced frontmatter key:

    ---
    type: moc
    hubsync:
      auto_gather_seeds: true
      seed_tags: [creativity, practice]
      update_frequency: daily      # realtime | daily | manual
    ---
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any

from hubsync.config import DetectionCfg
from hubsync.errors import DocumentIOError
from hubsync.log import get_logger
from hubsync.models import DetectionMethod, HubDocument, NoteMetadata, UpdateFrequency
from hubsync.parse.frontmatter import frontmatter_tags, normalize_tag
from hubsync.parse.headings import build_heading_map, parse_headings
from hubsync.parse.links import extract_links
from hubsync.parse.region import Markers, locate_region
from hubsync.store import ContentStore

log = get_logger(__name__)


@dataclass
class LivingConfig:
    auto_gather_seeds: bool = False
    seed_tags: frozenset[str] = frozenset()
    update_frequency: UpdateFrequency = UpdateFrequency.MANUAL

    @property
    def is_living(self) -> bool:
        return self.auto_gather_seeds and bool(self.seed_tags)


def parse_living_config(frontmatter: dict[str, Any], namespace: str = "hubsync") -> LivingConfig:
    """Read the namespaced living-hub block; malformed values fall back to defaults."""
    block = frontmatter.get(namespace)
    if not isinstance(block, dict):
        return LivingConfig()

    raw_tags = block.get("seed_tags")
    tags: set[str] = set()
    if isinstance(raw_tags, list):
        for tag in raw_tags:
            if isinstance(tag, str) and normalize_tag(tag):
                tags.add(normalize_tag(tag))

    return LivingConfig(
        auto_gather_seeds=block.get("auto_gather_seeds") is True,
        seed_tags=frozenset(tags),
        update_frequency=UpdateFrequency.parse(block.get("update_frequency")),
    )


def classify(
    path: str,
    meta: NoteMetadata,
    options: DetectionCfg | None = None,
) -> DetectionMethod | None:
    """Return how *path* qualifies as a hub, or None if it does not."""
    options = options or DetectionCfg()

    type_value = meta.frontmatter.get("type")
    if isinstance(type_value, str) and type_value.lower() == options.field_value.lower():
        return DetectionMethod.FIELD

    target_tag = normalize_tag(options.tag)
    if target_tag in meta.inline_tags or target_tag in frontmatter_tags(meta.frontmatter):
        return DetectionMethod.TAG

    if any(pattern in path for pattern in options.exclude_folders):
        return None
    if any(pattern in path for pattern in options.include_folders):
        return DetectionMethod.FOLDER

    return None


class HubDetector:
    """Classifies documents as hubs and parses them into ``HubDocument`` values."""

    def __init__(
        self,
        store: ContentStore,
        options: DetectionCfg | None = None,
        markers: Markers | None = None,
        namespace: str = "hubsync",
    ) -> None:
        self.store = store
        self.options = options or DetectionCfg()
        self.markers = markers or Markers()
        self.namespace = namespace

    def classify(self, path: str) -> DetectionMethod | None:
        try:
            meta = self.store.metadata(path)
        except OSError as exc:
            raise DocumentIOError(path, "index", exc) from exc
        return classify(path, meta, self.options)

    def hub_paths(self) -> list[str]:
        """Paths of all documents that classify as hubs.

        Documents that cannot be indexed are logged and skipped.
        """
        paths = []
        for path in self.store.list_documents():
            try:
                if self.classify(path):
                    paths.append(path)
            except DocumentIOError as exc:
                log.warning("hub.index_failed", path=path, error=str(exc))
        return paths

    async def parse(self, path: str) -> HubDocument:
        """Read and fully parse *path*.

        Documents that do not classify as hubs are still parsed, with
        ``detection_method`` set to None.
        """
        try:
            modified_at = self.store.mtime(path)
            text = await self.store.read(path)
            meta = self.store.metadata(path)
        except OSError as exc:
            raise DocumentIOError(path, "read", exc) from exc

        method = classify(path, meta, self.options)
        headings = parse_headings(text)
        total_lines = text.count("\n") + 1
        heading_map = build_heading_map(headings, total_lines)
        region = locate_region(text, self.markers)
        links = extract_links(text, meta.links, region, heading_map)
        living = parse_living_config(meta.frontmatter, self.namespace)

        log.debug(
            "hub.parsed",
            path=path,
            method=method.value if method else None,
            links=len(links),
            living=living.is_living,
            has_region=region is not None,
        )
        return HubDocument(
            path=path,
            title=PurePosixPath(path).stem,
            links=links,
            headings=headings,
            detection_method=method,
            is_living=living.is_living,
            seed_tags=living.seed_tags,
            update_frequency=living.update_frequency,
            region=region,
            auto_gather_seeds=living.auto_gather_seeds,
            modified_at=modified_at,
        )
