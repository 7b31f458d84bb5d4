"""Domain models for hub documents, seeds and patch history."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class UpdateFrequency(str, Enum):
    """How often a living hub is allowed to gather new seeds."""

    IMMEDIATE = "immediate"
    DAILY = "daily"
    MANUAL = "manual"

    @classmethod
    def parse(cls, value: object) -> UpdateFrequency:
        """Map a frontmatter value to a frequency; anything unknown is MANUAL.

        ``realtime`` is the frontmatter spelling of IMMEDIATE.
        """
        if not isinstance(value, str):
            return cls.MANUAL
        normalized = value.strip().lower()
        if normalized == "realtime":
            return cls.IMMEDIATE
        try:
            return cls(normalized)
        except ValueError:
            return cls.MANUAL


class DateFilter(str, Enum):
    """Creation-time window for seed queries, ending now."""

    ALL = "all"
    TODAY = "today"  # since local midnight
    WEEK = "week"  # last 7 days
    MONTH = "month"  # last 30 days


class DetectionMethod(str, Enum):
    """Rule that classified a document as a hub."""

    FIELD = "field"
    TAG = "tag"
    FOLDER = "folder"


@dataclass
class Heading:
    level: int
    text: str
    line: int
    children: list[Heading] = field(default_factory=list)


@dataclass(frozen=True)
class Region:
    """Managed region as absolute, half-open character offsets ``[start, end)``.

    A document without a managed region is represented by ``None``.
    """

    start: int
    end: int

    def __contains__(self, offset: object) -> bool:
        return isinstance(offset, int) and self.start <= offset < self.end


@dataclass(frozen=True)
class RawLink:
    """A link occurrence as reported by the metadata index.

    Attributes:
        link: Inner link text, e.g. ``Note#Section|Alias``.
        line: 0-based line number of the occurrence.
        column: 0-based column of the first character of the occurrence.
    """

    link: str
    line: int
    column: int


@dataclass
class LinkReference:
    target_path: str
    display_text: str
    heading: str | None
    line: int
    in_region: bool


@dataclass
class HubDocument:
    """Parsed hub document. Derived from raw text; never persisted."""

    path: str
    title: str
    links: list[LinkReference]
    headings: list[Heading]
    detection_method: DetectionMethod | None
    is_living: bool
    seed_tags: frozenset[str]
    update_frequency: UpdateFrequency
    region: Region | None
    auto_gather_seeds: bool = False
    modified_at: float = 0.0

    @property
    def region_links(self) -> list[LinkReference]:
        return [link for link in self.links if link.in_region]


@dataclass(frozen=True)
class SeedNote:
    """Snapshot of one seed note.

    ``backlinks`` lists the other documents linking to the seed, sorted.
    """

    path: str
    title: str
    tags: frozenset[str]
    created_at: float
    excerpt: str
    modified_at: float = 0.0
    backlinks: tuple[str, ...] = ()


@dataclass
class SeedGatherResult:
    """Outcome of ``SeedIndex.gather``.

    Attributes:
        seeds: Matching seeds after the date filter, sort and limit.
        total_count: Documents whose tags matched, before the date filter.
        filtered_count: Seeds left after the date filter, before the limit.
        tags: Normalized tags that were matched.
    """

    seeds: list[SeedNote]
    total_count: int
    filtered_count: int
    tags: frozenset[str]


@dataclass
class PatchResult:
    added_paths: list[str]
    previous_region_text: str


@dataclass
class PatchRecord:
    """One applied (or, for dry runs, prospective) update of a hub's region."""

    hub_path: str
    added_seed_paths: list[str]
    timestamp: float
    previous_region_text: str
    mode: UpdateFrequency


@dataclass
class CacheEntry:
    document: HubDocument
    cached_at: float
    source_mod_time: float


@dataclass
class UpdateOptions:
    """Per-call options for ``UpdateScheduler.update_one``.

    Attributes:
        force: Skip the update-frequency gate.
        dry_run: Compute the prospective record without writing anything.
        mode: Explicit trigger mode; required for ``manual`` hubs to update.
        notify: Emit a user notification when seeds are added.
    """

    force: bool = False
    dry_run: bool = False
    mode: UpdateFrequency | None = None
    notify: bool = False


@dataclass
class BatchError:
    path: str
    message: str


@dataclass
class BatchResult:
    success: bool = True
    updated_count: int = 0
    seeds_added_count: int = 0
    records: list[PatchRecord] = field(default_factory=list)
    errors: list[BatchError] = field(default_factory=list)


@dataclass
class NoteMetadata:
    """Cheap per-document index entry: frontmatter, tags and link occurrences."""

    frontmatter: dict = field(default_factory=dict)
    tags: frozenset[str] = frozenset()
    inline_tags: frozenset[str] = frozenset()
    links: list[RawLink] = field(default_factory=list)
