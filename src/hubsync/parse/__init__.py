"""Hub document parsing: headings, links, managed region, frontmatter."""

from hubsync.parse.frontmatter import build_metadata, split_frontmatter
from hubsync.parse.headings import build_heading_map, build_heading_tree, parse_headings
from hubsync.parse.links import extract_links, scan_wikilinks, split_link
from hubsync.parse.region import Markers, locate_region, splice_region

__all__ = [
    "Markers",
    "build_heading_map",
    "build_heading_tree",
    "build_metadata",
    "extract_links",
    "locate_region",
    "parse_headings",
    "scan_wikilinks",
    "splice_region",
    "split_frontmatter",
    "split_link",
]
