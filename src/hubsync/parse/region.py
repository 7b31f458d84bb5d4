"""Managed-region locator.

The managed region is the text between the first begin marker and the first
end marker:

    manual content
    <!-- BEGIN AUTO -->
    - [[2026-10-01 Idea]] - "A creative thought about..." #creativity
    <!-- END AUTO -->
    manual content

Offsets are always computed from the text being edited; they are never kept
across writes.
"""

from __future__ import annotations

from dataclasses import dataclass

from hubsync.models import Region

DEFAULT_BEGIN_MARKER = "<!-- BEGIN AUTO -->"
DEFAULT_END_MARKER = "<!-- END AUTO -->"


@dataclass(frozen=True)
class Markers:
    begin: str = DEFAULT_BEGIN_MARKER
    end: str = DEFAULT_END_MARKER


def locate_region(text: str, markers: Markers | None = None) -> Region | None:
    """Return the region between the markers, or None if absent or out of order.

    ``start`` is the index just past the begin marker and ``end`` the index of
    the end marker's first character.
    """
    markers = markers or Markers()
    begin = text.find(markers.begin)
    end = text.find(markers.end)
    if begin == -1 or end == -1 or end <= begin:
        return None
    start = begin + len(markers.begin)
    if end < start:
        # end marker overlaps the begin marker
        return None
    return Region(start=start, end=end)


def splice_region(text: str, region: Region, replacement: str) -> str:
    """Replace ``text[region.start:region.end]`` with *replacement*."""
    return text[: region.start] + replacement + text[region.end :]
