"""Exception types raised by the hubsync engine."""

from __future__ import annotations


class HubsyncError(Exception):
    """Base class for all per-document engine failures."""


class MissingRegionError(HubsyncError):
    """A living hub has no (or malformed) managed-region markers."""

    def __init__(self, path: str, begin: str = "", end: str = "") -> None:
        self.path = path
        hint = f" Add {begin} and {end} to the document." if begin and end else ""
        super().__init__(f"No managed region in '{path}'.{hint}")


class DocumentIOError(HubsyncError):
    """Reading or writing a document failed.

    The underlying ``OSError`` is available as ``__cause__``.
    """

    def __init__(self, path: str, action: str, cause: BaseException) -> None:
        self.path = path
        self.action = action
        super().__init__(f"Failed to {action} '{path}': {cause}")
