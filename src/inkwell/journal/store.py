"""EntryStore — the in-memory journal and its JSON mirror on disk.

The whole collection is the unit of durability: every mutation updates the
in-memory list, serializes all of it, and atomically replaces the backing
document. Load and save failures are logged and absorbed so a missing,
corrupt or unwritable document never takes the application down; the only
error a caller sees is ``IndexError`` from ``delete_at`` with a bad index.

All methods are meant to be called from one owner thread.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from datetime import datetime
from pathlib import Path

from loguru import logger

from inkwell.core.events import (
    ENTRY_CREATED,
    ENTRY_DELETED,
    ENTRY_UPDATED,
    JOURNAL_LOADED,
    JOURNAL_RELOADED,
    Event,
    EventBus,
)
from inkwell.core.exceptions import DocumentDecodeError
from inkwell.core.storage import FileSystem, LocalFileSystem, StorageError, StorageKeyError

from .locations import StorageLocation
from .models import EmptyReason, Entry, LoadResult, TimestampFormat, decode_entries, encode_entries, utcnow


class EntryStore:
    """Ordered, newest-first collection of entries backed by one JSON document.

    Args:
        location: Resolved backing document (or a plain path for local-only use).
        fs: File-system backend. Defaults to the local filesystem.
        events: Bus that receives load/create/update/delete notifications.
        clock: Source of "now" for timestamps.
        timestamp_format: How timestamps are written to the document.
    """

    def __init__(
        self,
        location: StorageLocation | str | Path,
        fs: FileSystem | None = None,
        events: EventBus | None = None,
        clock: Callable[[], datetime] = utcnow,
        timestamp_format: TimestampFormat = TimestampFormat.ISO,
    ) -> None:
        if not isinstance(location, StorageLocation):
            location = StorageLocation(Path(location).expanduser())
        self._location = location
        self._fs = fs or LocalFileSystem()
        self.events = events or EventBus()
        self._clock = clock
        self.timestamp_format = TimestampFormat(timestamp_format)
        self._entries: list[Entry] = []

    # -- Location -----------------------------------------------------------

    @property
    def location(self) -> StorageLocation:
        return self._location

    @property
    def path(self) -> Path:
        return self._location.path

    def relocate(self, location: StorageLocation) -> None:
        """Point the store at a different backing document.

        The in-memory collection is left alone; call ``load()`` to read the
        new document.
        """
        if location != self._location:
            logger.info(f"Journal relocated: {self._location.path} -> {location.path} ({location.mode})")
        self._location = location

    # -- Load / save --------------------------------------------------------

    def _read(self) -> LoadResult:
        path = self._location.path
        try:
            data = self._fs.read_bytes(path)
        except StorageKeyError:
            return LoadResult.empty(EmptyReason.NOT_FOUND, f"{path} does not exist")
        except StorageError as e:
            return LoadResult.empty(EmptyReason.UNREADABLE, str(e))
        try:
            return LoadResult.ok(decode_entries(data))
        except DocumentDecodeError as e:
            return LoadResult.empty(EmptyReason.CORRUPT, str(e))

    def load(self) -> LoadResult:
        """Replace the in-memory collection with the backing document.

        On a missing, unreadable or undecodable document the collection is
        reset to empty and the reason is logged. The document itself is never
        touched here.
        """
        result = self._read()
        if result.is_ok:
            self._entries = self._dedupe(list(result.entries))
            logger.debug(f"Loaded {len(self._entries)} entries from {self.path}")
        else:
            self._entries = []
            if result.reason is EmptyReason.NOT_FOUND:
                logger.info(f"No journal at {self.path}; starting empty")
            else:
                logger.warning(f"Failed to load journal from {self.path} ({result.reason}): {result.detail}")
        self._emit(JOURNAL_LOADED, count=len(self._entries), status=str(result.status))
        return result

    def reload(self) -> LoadResult:
        """Load again after an external change. Last full write wins."""
        result = self.load()
        self._emit(JOURNAL_RELOADED, count=len(self._entries), status=str(result.status))
        return result

    @staticmethod
    def _dedupe(entries: list[Entry]) -> list[Entry]:
        seen: set[str] = set()
        unique = []
        for entry in entries:
            if entry.id in seen:
                logger.warning(f"Dropping duplicate journal entry id {entry.id}")
                continue
            seen.add(entry.id)
            unique.append(entry)
        return unique

    def save(self) -> bool:
        """Atomically write the whole collection. Returns False if the write failed."""
        try:
            payload = encode_entries(self._entries, self.timestamp_format)
            self._fs.atomic_write(self.path, payload)
        except (StorageError, TypeError, ValueError) as e:
            logger.error(f"Failed to save {len(self._entries)} entries to {self.path}: {e}")
            return False
        logger.debug(f"Saved {len(self._entries)} entries to {self.path}")
        return True

    # -- Mutations ----------------------------------------------------------

    def create(
        self,
        title: str,
        content: str = "",
        mood: str = "Neutral",
        date: datetime | None = None,
        image_data: bytes | None = None,
    ) -> str:
        """Insert a new entry at the head and persist. Returns the new id."""
        entry = Entry.new(title, content, mood, date=date, image_data=image_data, now=self._clock())
        while self._index_of(entry.id) is not None:
            entry = Entry.new(title, content, mood, date=date, image_data=image_data, now=entry.created_at)
        self._entries.insert(0, entry)
        self.save()
        self._emit(ENTRY_CREATED, id=entry.id)
        return entry.id

    def update(
        self,
        entry_id: str,
        *,
        title: str | None = None,
        content: str | None = None,
        mood: str | None = None,
        date: datetime | None = None,
        image_data: bytes | None = None,
    ) -> bool:
        """Merge the supplied fields into an entry and persist.

        Fields left as ``None`` keep their current value, so an edit that
        doesn't carry new photo bytes keeps the existing photo. Unknown ids
        are ignored. Returns whether an entry was updated.
        """
        index = self._index_of(entry_id)
        if index is None:
            logger.debug(f"Update ignored, no entry {entry_id}")
            return False
        self._entries[index] = self._entries[index].with_changes(
            title=title,
            content=content,
            mood=mood,
            date=date,
            image_data=image_data,
            now=self._clock(),
        )
        self.save()
        self._emit(ENTRY_UPDATED, id=entry_id)
        return True

    def delete(self, entry_id: str) -> bool:
        """Remove an entry by id and persist. Unknown ids are a no-op."""
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.id != entry_id]
        if len(self._entries) == before:
            return False
        self.save()
        self._emit(ENTRY_DELETED, ids=[entry_id])
        return True

    def delete_at(self, positions: int | Iterable[int]) -> list[str]:
        """Remove entries by position (as a list UI reports swipes) and persist.

        Raises:
            IndexError: if any position is out of range. Nothing is removed.
        """
        indices = {positions} if isinstance(positions, int) else set(positions)
        for i in indices:
            if not 0 <= i < len(self._entries):
                raise IndexError(f"entry index {i} out of range (have {len(self._entries)})")
        if not indices:
            return []
        removed = [self._entries[i].id for i in sorted(indices)]
        self._entries = [e for i, e in enumerate(self._entries) if i not in indices]
        self.save()
        self._emit(ENTRY_DELETED, ids=removed)
        return removed

    # -- Queries ------------------------------------------------------------

    def list(self) -> list[Entry]:
        """Snapshot of the collection, newest first."""
        return list(self._entries)

    def get(self, entry_id: str) -> Entry | None:
        index = self._index_of(entry_id)
        return self._entries[index] if index is not None else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.list())

    def diagnostics(self) -> str:
        """Human-readable storage info. Reads only."""
        path = self.path
        exists = self._fs.exists(path)
        if exists:
            try:
                file_size = f"{self._fs.size(path)} bytes"
            except StorageError:
                file_size = "Unknown"
        else:
            file_size = "File doesn't exist"
        return "\n".join(
            [
                f"Storage Location: {path}",
                f"Storage Mode: {self._location.mode}",
                f"File Exists: {exists}",
                f"File Size: {file_size}",
                f"Entries in Memory: {len(self._entries)}",
            ]
        )

    # -- Internals ----------------------------------------------------------

    def _index_of(self, entry_id: str) -> int | None:
        for i, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return i
        return None

    def _emit(self, name: str, **payload) -> None:
        self.events.emit(Event(name=name, payload=payload, source="store"))
