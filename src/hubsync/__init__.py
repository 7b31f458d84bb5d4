"""hubsync: keeps hub documents in a Markdown vault in sync with new seed notes."""

from hubsync.engine import HubEngine
from hubsync.errors import DocumentIOError, HubsyncError, MissingRegionError
from hubsync.models import (
    BatchResult,
    DetectionMethod,
    HubDocument,
    PatchRecord,
    SeedNote,
    UpdateFrequency,
    UpdateOptions,
)

__all__ = [
    "BatchResult",
    "DetectionMethod",
    "DocumentIOError",
    "HubDocument",
    "HubEngine",
    "HubsyncError",
    "MissingRegionError",
    "PatchRecord",
    "SeedNote",
    "UpdateFrequency",
    "UpdateOptions",
]
