"""Content store interface and the file-system vault implementation.

The engine only talks to a ``ContentStore``:
  - ``read`` / ``write`` are awaitable and are the only suspension points;
  - ``mtime`` / ``created_at`` / ``metadata`` are cheap index lookups;
  - ``subscribe`` delivers create/modify notifications on the event loop.

``FileSystemStore`` maps a directory of ``*.md`` notes onto that interface.
Paths are POSIX strings relative to the vault root.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from hubsync.models import NoteMetadata
from hubsync.parse.frontmatter import build_metadata

# Vault folders that never hold notes.
_IGNORED_DIRS: frozenset[str] = frozenset([".obsidian", ".trash", ".git"])


@dataclass(frozen=True)
class ChangeEvent:
    kind: str  # create | modify
    path: str


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription:
    """Handle returned by ``ContentStore.subscribe``; ``unsubscribe`` is idempotent."""

    def __init__(self, cancel: Callable[[], None]) -> None:
        self._cancel: Callable[[], None] | None = cancel

    @property
    def active(self) -> bool:
        return self._cancel is not None

    def unsubscribe(self) -> None:
        if self._cancel is not None:
            cancel, self._cancel = self._cancel, None
            cancel()


class ContentStore(ABC):
    """Abstract document store used by the parser, patcher and watcher."""

    @abstractmethod
    async def read(self, path: str) -> str:
        """Return the full text of *path*.

        Raises OSError on failure, including text that cannot be decoded.
        """

    @abstractmethod
    async def write(self, path: str, text: str) -> None:
        """Replace the content of *path* with *text* in a single write."""

    @abstractmethod
    def mtime(self, path: str) -> float:
        """Modification time of *path* (POSIX seconds)."""

    @abstractmethod
    def created_at(self, path: str) -> float:
        """Creation time of *path* (POSIX seconds)."""

    @abstractmethod
    def list_documents(self) -> list[str]:
        """All Markdown documents in the store, sorted by path."""

    @abstractmethod
    def metadata(self, path: str) -> NoteMetadata:
        """Frontmatter, tags and raw link occurrences of *path*."""

    @abstractmethod
    def subscribe(self, callback: ChangeCallback) -> Subscription:
        """Deliver create/modify events for documents to *callback*."""


# ---------------------------------------------------------------------------
# File-system vault
# ---------------------------------------------------------------------------


def atomic_write_text(path: Path, content: str) -> None:
    """Write *content* to *path* atomically (temp → rename).

    Creates parent directories if needed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Write to a temp file in the same directory, then rename
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


class FileSystemStore(ContentStore):
    """A vault directory of Markdown notes.

    Metadata is indexed lazily per document and memoized against the file's
    modification time, so repeated lookups cost one ``stat`` call.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()
        self._index: dict[str, tuple[float, NoteMetadata]] = {}

    def resolve(self, path: str) -> Path:
        return self.root / path

    def relative(self, full: Path) -> str:
        return full.relative_to(self.root).as_posix()

    async def read(self, path: str) -> str:
        return await asyncio.to_thread(self._read_sync, path)

    async def write(self, path: str, text: str) -> None:
        await asyncio.to_thread(atomic_write_text, self.resolve(path), text)
        self._index.pop(path, None)

    def mtime(self, path: str) -> float:
        return self.resolve(path).stat().st_mtime

    def created_at(self, path: str) -> float:
        """Birth time where the platform records one (macOS, BSD, Windows).

        Linux has no ``st_birthtime``; ``st_ctime`` there is the last inode
        change, so a rewritten note looks newly created. Notes can pin their
        creation time with a frontmatter ``created`` field (see ``SeedIndex``).
        """
        st = self.resolve(path).stat()
        return getattr(st, "st_birthtime", st.st_ctime)

    def list_documents(self) -> list[str]:
        if not self.root.is_dir():
            return []
        docs = []
        for p in self.root.rglob("*.md"):
            rel = p.relative_to(self.root)
            if any(part in _IGNORED_DIRS for part in rel.parts) or not p.is_file():
                continue
            docs.append(rel.as_posix())
        return sorted(docs)

    def metadata(self, path: str) -> NoteMetadata:
        mtime = self.mtime(path)
        cached = self._index.get(path)
        if cached and cached[0] == mtime:
            return cached[1]
        meta = build_metadata(self._read_sync(path))
        self._index[path] = (mtime, meta)
        return meta

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        """Watch the vault with a watchdog observer thread.

        Must be called from a running event loop: events are handed to
        *callback* on that loop via ``call_soon_threadsafe``.
        """
        loop = asyncio.get_running_loop()
        handler = _VaultEventHandler(self, lambda event: loop.call_soon_threadsafe(callback, event))
        observer = Observer()
        observer.schedule(handler, str(self.root), recursive=True)
        observer.daemon = True
        observer.start()

        def _stop() -> None:
            observer.stop()
            observer.join(timeout=5)

        return Subscription(_stop)

    def _read_sync(self, path: str) -> str:
        # newline="" keeps line endings intact so rewrites are byte-exact
        try:
            with open(self.resolve(path), encoding="utf-8", newline="") as f:
                return f.read()
        except UnicodeDecodeError as exc:
            raise OSError(f"'{path}' is not valid UTF-8: {exc}") from exc


class _VaultEventHandler(FileSystemEventHandler):
    """Translate watchdog events into ``ChangeEvent``s for Markdown files."""

    def __init__(self, store: FileSystemStore, dispatch: ChangeCallback) -> None:
        self.store = store
        self.dispatch = dispatch

    def _emit(self, kind: str, src: str | bytes) -> None:
        full = Path(os.fsdecode(src))
        if full.suffix != ".md":
            return
        try:
            rel = self.store.relative(full)
        except ValueError:
            return
        if any(part in _IGNORED_DIRS for part in Path(rel).parts):
            return
        self.dispatch(ChangeEvent(kind=kind, path=rel))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit("create", event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit("modify", event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save via rename surface as moves onto the note path.
        if not event.is_directory:
            self._emit("create", event.dest_path)
