from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Protocol

from notes_api.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they are always stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def next_updated_at(previous: datetime) -> datetime:
    """Current time, or one microsecond past ``previous`` if the clock lags."""
    now = _utc_now()
    previous = _as_utc(previous)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def new_note_id() -> str:
    return str(uuid.uuid4())


def clean_title(title: Optional[str]) -> str:
    if title is None or not title.strip():
        raise ValidationError("Title is required")
    return title


@dataclass(frozen=True)
class Note:
    id: str
    owner_id: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Wire shape; the owner stays server-side."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "createdAt": _as_utc(self.created_at).isoformat(),
            "updatedAt": _as_utc(self.updated_at).isoformat(),
        }


class NotesStore(Protocol):
    def list_notes(self, owner_id: str) -> list[Note]: ...

    def get_note(self, owner_id: str, note_id: str) -> Optional[Note]: ...

    def save_note(
        self, owner_id: str, note_id: Optional[str], title: str, content: str
    ) -> Note: ...

    def delete_note(self, owner_id: str, note_id: str) -> None: ...


def _sort_key(note: Note) -> tuple[datetime, datetime]:
    return (note.updated_at, note.created_at)


class InMemoryNotesStore:
    """Dict-backed store with the same contract as the SQL store."""

    def __init__(self) -> None:
        self._notes: dict[str, Note] = {}
        self._lock = threading.Lock()

    def list_notes(self, owner_id: str) -> list[Note]:
        with self._lock:
            owned = [n for n in self._notes.values() if n.owner_id == owner_id]
        return sorted(owned, key=_sort_key, reverse=True)

    def get_note(self, owner_id: str, note_id: str) -> Optional[Note]:
        with self._lock:
            note = self._notes.get(note_id)
        if note is None or note.owner_id != owner_id:
            return None
        return note

    def save_note(
        self, owner_id: str, note_id: Optional[str], title: str, content: str
    ) -> Note:
        title = clean_title(title)
        with self._lock:
            existing = self._notes.get(note_id) if note_id else None
            if existing is None:
                now = _utc_now()
                note = Note(
                    id=new_note_id(),
                    owner_id=owner_id,
                    title=title,
                    content=content,
                    created_at=now,
                    updated_at=now,
                )
                logger.info("Created note %s for %s", note.id, owner_id)
            elif existing.owner_id != owner_id:
                raise NotFoundError()
            else:
                note = replace(
                    existing,
                    title=title,
                    content=content,
                    updated_at=next_updated_at(existing.updated_at),
                )
                logger.info("Updated note %s", note.id)
            self._notes[note.id] = note
        return note

    def delete_note(self, owner_id: str, note_id: str) -> None:
        with self._lock:
            note = self._notes.get(note_id)
            if note is None or note.owner_id != owner_id:
                raise NotFoundError()
            del self._notes[note_id]
        logger.info("Deleted note %s", note_id)
