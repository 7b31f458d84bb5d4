"""Frontmatter and tag extraction for the metadata index."""

from __future__ import annotations

import re
from typing import Any

import yaml

from hubsync.models import NoteMetadata
from hubsync.parse.links import scan_wikilinks

# Delimiter lines are exactly "---", with LF or CRLF endings.
_FM_OPEN_RE = re.compile(r"---\r?\n")
_FM_CLOSE_RE = re.compile(r"^---(?:\r?\n|\Z)", re.MULTILINE)

# Inline tag: '#' at start or after whitespace, not followed by another '#'
# or whitespace (which would make it a heading marker).
_INLINE_TAG_RE = re.compile(r"(?:(?<=\s)|^)#([^\s#\[\]{}()<>,;:!?.\"'`]+)", re.MULTILINE)
_HEADING_LINE_RE = re.compile(r"^#{1,6}\s")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")


def split_frontmatter(raw: str) -> tuple[dict[str, Any], str, int]:
    """Return ``(frontmatter, body, body_first_line)``.

    Malformed or non-mapping frontmatter is treated as empty; the body then
    starts after the closing delimiter if one was found.
    """
    raw = raw.lstrip("\ufeff")
    opening = _FM_OPEN_RE.match(raw)
    if opening is None:
        return {}, raw, 0
    closing = _FM_CLOSE_RE.search(raw, opening.end())
    if closing is None:
        return {}, raw, 0

    yaml_text = raw[opening.end() : closing.start()]
    body = raw[closing.end() :]
    body_first_line = raw[: closing.end()].count("\n")

    try:
        data = yaml.safe_load(yaml_text) or {}
    except yaml.YAMLError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    return data, body, body_first_line


def normalize_tag(tag: str) -> str:
    return tag.strip().lstrip("#").strip().lower()


def frontmatter_tags(frontmatter: dict[str, Any]) -> set[str]:
    """Tags declared in ``tags`` / ``tag`` (list or single string)."""
    found: set[str] = set()
    for key in ("tags", "tag"):
        value = frontmatter.get(key)
        if isinstance(value, str):
            candidates = [value]
        elif isinstance(value, list):
            candidates = [v for v in value if isinstance(v, str)]
        else:
            continue
        for candidate in candidates:
            tag = normalize_tag(candidate)
            if tag:
                found.add(tag)
    return found


def inline_tags(body: str) -> set[str]:
    """``#tags`` in the body, skipping heading lines and fenced code."""
    found: set[str] = set()
    in_fence = False
    for line in body.split("\n"):
        if _FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence or _HEADING_LINE_RE.match(line):
            continue
        for match in _INLINE_TAG_RE.finditer(line):
            tag = normalize_tag(match.group(1))
            if tag and not tag.isdigit():
                found.add(tag)
    return found


def build_metadata(raw: str) -> NoteMetadata:
    """Index one document: frontmatter, all tags and raw link occurrences."""
    frontmatter, body, first_line = split_frontmatter(raw)
    inline = inline_tags(body)
    return NoteMetadata(
        frontmatter=frontmatter,
        tags=frozenset(inline | frontmatter_tags(frontmatter)),
        inline_tags=frozenset(inline),
        links=scan_wikilinks(body, first_line=first_line),
    )
