"""Heading hierarchy parser.

Turns raw Markdown into a tree of ``Heading`` nodes and a line → enclosing
heading lookup. Nodes own their children; there are no parent pointers, so
"which heading is this line under" is answered by ``build_heading_map``.

Example:
    # Level 1          →  Level 1
    ## Level 2a             ├── Level 2a
    ### Level 3             │   └── Level 3
    ## Level 2b             └── Level 2b
"""

from __future__ import annotations

import re

from hubsync.models import Heading

# 1-6 '#' markers, whitespace, then the heading text.
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")


def parse_headings(text: str) -> list[Heading]:
    """Return the top-level headings of *text* with nested children."""
    flat: list[Heading] = []
    for line_no, line in enumerate(text.split("\n")):
        match = _HEADING_RE.match(line)
        if match:
            flat.append(
                Heading(level=len(match.group(1)), text=match.group(2).strip(), line=line_no)
            )
    return build_heading_tree(flat)


def build_heading_tree(flat: list[Heading]) -> list[Heading]:
    """Nest a document-ordered list of headings by level.

    Single pass with a stack: pop while the top's level is >= the new level,
    attach to the remaining top (or as a root), then push.
    """
    roots: list[Heading] = []
    stack: list[Heading] = []

    for heading in flat:
        node = Heading(level=heading.level, text=heading.text, line=heading.line)
        while stack and stack[-1].level >= node.level:
            stack.pop()
        if stack:
            stack[-1].children.append(node)
        else:
            roots.append(node)
        stack.append(node)

    return roots


def build_heading_map(headings: list[Heading], total_lines: int) -> dict[int, str]:
    """Map each body line to the text of its nearest enclosing heading.

    A heading owns the lines after it up to its first child (or up to its own
    end when it has no children). Children are assigned before their parent so
    the innermost heading wins. Heading lines themselves are not mapped.
    """
    mapping: dict[int, str] = {}

    def _assign(heading: Heading, end_line: int) -> None:
        for i, child in enumerate(heading.children):
            child_end = (
                heading.children[i + 1].line if i + 1 < len(heading.children) else end_line
            )
            _assign(child, child_end)

        first_child = heading.children[0].line if heading.children else end_line
        for line in range(heading.line + 1, first_child):
            mapping.setdefault(line, heading.text)

    for i, heading in enumerate(headings):
        end = headings[i + 1].line if i + 1 < len(headings) else total_lines
        _assign(heading, end)

    return mapping


def iter_headings(headings: list[Heading]):
    """Yield every heading in the tree in document order (depth-first)."""
    for heading in headings:
        yield heading
        yield from iter_headings(heading.children)
