"""Journal data models and the JSON document codec.

An ``Entry`` is immutable: edits go through ``Entry.with_changes`` which
returns a new value, so snapshots handed to callers can never drift from
what the store holds. Timestamps are always timezone-aware; a naive
datetime handed to the model is taken as UTC (see ``as_utc``).

The backing document is a JSON array of entry objects::

    [{"id": "...", "title": "...", "content": "...", "date": "...",
      "mood": "Happy", "createdAt": "...", "modifiedAt": "...",
      "imageData": "<base64>"}]

Timestamps are ISO-8601 strings by default, or seconds since
``REFERENCE_DATE`` with ``TimestampFormat.REFERENCE``.
"""

from __future__ import annotations

import base64
import binascii
import json
import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any

from inkwell.core.exceptions import DocumentDecodeError

# Numeric timestamps are seconds since this instant (how Apple platform
# JSON encoders write dates by default).
REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=UTC)


class Mood(StrEnum):
    """Mood labels offered by the front-ends. The store never validates mood."""

    HAPPY = "Happy"
    SAD = "Sad"
    EXCITED = "Excited"
    CALM = "Calm"
    GRATEFUL = "Grateful"
    NEUTRAL = "Neutral"


MOODS: list[str] = [m.value for m in Mood]


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are UTC wall-clock times; aware ones are kept as given."""
    return dt if dt.tzinfo else dt.replace(tzinfo=UTC)


def new_entry_id() -> str:
    return str(uuid.uuid4()).upper()


# ---------------------------------------------------------------------------
# Timestamp / image helpers
# ---------------------------------------------------------------------------


class TimestampFormat(StrEnum):
    """How timestamps are written. Both forms are accepted on read."""

    ISO = "iso"
    REFERENCE = "reference"


def _format_timestamp(dt: datetime, fmt: TimestampFormat = TimestampFormat.ISO) -> str | float:
    if fmt is TimestampFormat.REFERENCE:
        return (as_utc(dt) - REFERENCE_DATE).total_seconds()
    return as_utc(dt).isoformat()


def _parse_timestamp(value: Any, key: str) -> datetime:
    """Accept ISO-8601 strings or reference-date seconds."""
    if isinstance(value, bool):
        raise DocumentDecodeError(f"{key}: expected a timestamp, got {value!r}")
    if isinstance(value, int | float):
        try:
            if not math.isfinite(value):
                raise DocumentDecodeError(f"{key}: timestamp must be finite, got {value!r}")
            return REFERENCE_DATE + timedelta(seconds=value)
        except (OverflowError, ValueError) as e:
            raise DocumentDecodeError(f"{key}: timestamp {value!r} out of range") from e
    if isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value)
        except ValueError as e:
            raise DocumentDecodeError(f"{key}: invalid timestamp {value!r}") from e
        return as_utc(dt)
    raise DocumentDecodeError(f"{key}: expected a timestamp, got {type(value).__name__}")


def _decode_image(value: Any) -> bytes | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise DocumentDecodeError(f"imageData: expected base64 text, got {type(value).__name__}")
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DocumentDecodeError(f"imageData: invalid base64 ({e})") from e


def _require_str(data: dict[str, Any], key: str) -> str:
    if key not in data:
        raise DocumentDecodeError(f"missing required key {key!r}")
    value = data[key]
    if not isinstance(value, str):
        raise DocumentDecodeError(f"{key}: expected text, got {type(value).__name__}")
    return value


# ---------------------------------------------------------------------------
# Entry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Entry:
    """One journal record.

    Attributes:
        id: Opaque unique identifier, fixed at creation.
        title: User-editable title.
        content: User-editable body text.
        date: The date shown to the user; set by the caller.
        mood: Free-form mood label (see ``Mood`` for the usual ones).
        created_at: Construction time, never changes.
        modified_at: Bumped on every content-affecting edit.
        image_data: Encoded photo bytes, treated opaquely.
    """

    id: str
    title: str
    content: str
    date: datetime
    mood: str
    created_at: datetime
    modified_at: datetime
    image_data: bytes | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        for name in ("date", "created_at", "modified_at"):
            object.__setattr__(self, name, as_utc(getattr(self, name)))

    @classmethod
    def new(
        cls,
        title: str,
        content: str,
        mood: str,
        date: datetime | None = None,
        image_data: bytes | None = None,
        now: datetime | None = None,
    ) -> Entry:
        """Build a fresh entry with a new id and both timestamps set to *now*."""
        now = now or utcnow()
        return cls(
            id=new_entry_id(),
            title=title,
            content=content,
            date=date or now,
            mood=mood,
            created_at=now,
            modified_at=now,
            image_data=image_data,
        )

    def with_changes(
        self,
        *,
        title: str | None = None,
        content: str | None = None,
        mood: str | None = None,
        date: datetime | None = None,
        image_data: bytes | None = None,
        now: datetime | None = None,
    ) -> Entry:
        """Merge the supplied fields. ``None`` means "leave as is"."""
        changes: dict[str, Any] = {"modified_at": now or utcnow()}
        if title is not None:
            changes["title"] = title
        if content is not None:
            changes["content"] = content
        if mood is not None:
            changes["mood"] = mood
        if date is not None:
            changes["date"] = date
        if image_data is not None:
            changes["image_data"] = image_data
        return replace(self, **changes)

    @property
    def has_image(self) -> bool:
        return self.image_data is not None

    @property
    def formatted_date(self) -> str:
        """Medium-style date, e.g. ``Sep 20, 2025``."""
        d = self.date
        return f"{d:%b} {d.day}, {d.year}"

    def to_dict(self, timestamp_format: TimestampFormat = TimestampFormat.ISO) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "date": _format_timestamp(self.date, timestamp_format),
            "mood": self.mood,
            "createdAt": _format_timestamp(self.created_at, timestamp_format),
            "modifiedAt": _format_timestamp(self.modified_at, timestamp_format),
        }
        if self.image_data is not None:
            data["imageData"] = base64.b64encode(self.image_data).decode("ascii")
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Entry:
        """Decode one entry object.

        ``createdAt``/``modifiedAt`` fall back to ``date`` when absent (the
        desktop build never wrote them); ``imageData`` may be missing or null.
        Unknown keys are ignored.
        """
        if not isinstance(data, dict):
            raise DocumentDecodeError(f"entry must be an object, got {type(data).__name__}")
        if "date" not in data:
            raise DocumentDecodeError("missing required key 'date'")
        date = _parse_timestamp(data["date"], "date")
        created = _parse_timestamp(data["createdAt"], "createdAt") if data.get("createdAt") is not None else date
        modified = (
            _parse_timestamp(data["modifiedAt"], "modifiedAt") if data.get("modifiedAt") is not None else created
        )
        return cls(
            id=_require_str(data, "id"),
            title=_require_str(data, "title"),
            content=_require_str(data, "content"),
            date=date,
            mood=_require_str(data, "mood"),
            created_at=created,
            modified_at=modified,
            image_data=_decode_image(data.get("imageData")),
        )


# ---------------------------------------------------------------------------
# Document codec
# ---------------------------------------------------------------------------


def encode_entries(
    entries: list[Entry] | tuple[Entry, ...],
    timestamp_format: TimestampFormat = TimestampFormat.ISO,
) -> bytes:
    """Serialize the whole collection, preserving order."""
    payload = [e.to_dict(timestamp_format) for e in entries]
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")


def decode_entries(data: bytes) -> list[Entry]:
    """Parse a backing document.

    Raises:
        DocumentDecodeError: if the bytes aren't a JSON array of valid entries.
    """
    try:
        raw = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DocumentDecodeError(f"not valid JSON: {e}") from e
    if not isinstance(raw, list):
        raise DocumentDecodeError(f"expected a JSON array, got {type(raw).__name__}")
    entries = []
    for i, item in enumerate(raw):
        try:
            entries.append(Entry.from_dict(item))
        except DocumentDecodeError as e:
            raise DocumentDecodeError(f"entry {i}: {e}") from e
    return entries


# ---------------------------------------------------------------------------
# Load outcome
# ---------------------------------------------------------------------------


class LoadStatus(StrEnum):
    OK = "ok"
    EMPTY = "empty"


class EmptyReason(StrEnum):
    NOT_FOUND = "not_found"
    CORRUPT = "corrupt"
    UNREADABLE = "unreadable"


@dataclass(frozen=True)
class LoadResult:
    """Outcome of reading the backing document.

    ``OK`` carries the decoded entries; ``EMPTY`` says why the collection was
    reset instead. Neither case raises across the store's public surface.
    """

    status: LoadStatus
    entries: tuple[Entry, ...] = ()
    reason: EmptyReason | None = None
    detail: str = ""

    @classmethod
    def ok(cls, entries: list[Entry]) -> LoadResult:
        return cls(status=LoadStatus.OK, entries=tuple(entries))

    @classmethod
    def empty(cls, reason: EmptyReason, detail: str = "") -> LoadResult:
        return cls(status=LoadStatus.EMPTY, reason=reason, detail=detail)

    @property
    def is_ok(self) -> bool:
        return self.status is LoadStatus.OK
