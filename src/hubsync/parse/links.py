"""Wikilink scanning and normalization.

``scan_wikilinks`` is the indexer side: it finds ``[[...]]`` / ``![[...]]``
occurrences with their line and column. ``extract_links`` is the parser side:
it never re-scans text for link syntax, it only resolves occurrences into
``LinkReference`` records with heading and managed-region context.

Handled link forms:
    [[Note]]                → target "Note", display "Note"
    [[Note|Alias]]          → target "Note", display "Alias"
    [[Note#Section]]        → target "Note", display "Note"
    [[Note#Section|Alias]]  → target "Note", display "Alias"
    ![[Note]]               → embed, treated as a link
"""

from __future__ import annotations

import itertools
import re

from hubsync.models import LinkReference, RawLink, Region

_WIKILINK_RE = re.compile(r"!?\[\[([^\[\]\n]+?)\]\]")


def scan_wikilinks(text: str, first_line: int = 0) -> list[RawLink]:
    """Return every wikilink/embed occurrence in *text* in document order.

    Args:
        text: Raw document text (or a slice of it).
        first_line: Line number of the first line of *text*; lets callers skip
            frontmatter while keeping document-relative line numbers.
    """
    occurrences: list[RawLink] = []
    for offset, line in enumerate(text.split("\n")):
        for match in _WIKILINK_RE.finditer(line):
            occurrences.append(
                RawLink(link=match.group(1).strip(), line=first_line + offset, column=match.start())
            )
    return occurrences


def split_link(raw: str) -> tuple[str, str]:
    """Split raw link text into ``(target, display_text)``."""
    target_part, sep, alias = raw.partition("|")
    target = target_part.split("#", 1)[0]
    display = alias if sep else target
    return target, display


def line_offsets(text: str) -> list[int]:
    """Absolute offset of the first character of each line (``\\n`` terminated)."""
    lengths = (len(line) + 1 for line in text.split("\n"))
    return [0, *itertools.accumulate(lengths)][:-1]


def extract_links(
    text: str,
    occurrences: list[RawLink],
    region: Region | None,
    heading_map: dict[int, str] | None = None,
) -> list[LinkReference]:
    """Resolve raw occurrences into ``LinkReference`` records.

    A link is in the managed region iff its absolute offset lies in the
    half-open interval ``[region.start, region.end)``: a link starting exactly
    at the end marker is outside. Output order matches *occurrences*.
    """
    heading_map = heading_map or {}
    starts = line_offsets(text)

    links: list[LinkReference] = []
    for occ in occurrences:
        target, display = split_link(occ.link)
        line_start = starts[occ.line] if occ.line < len(starts) else len(text)
        offset = line_start + occ.column
        links.append(
            LinkReference(
                target_path=target,
                display_text=display,
                heading=heading_map.get(occ.line),
                line=occ.line,
                in_region=region is not None and offset in region,
            )
        )
    return links
