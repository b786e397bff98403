from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from notes_api.errors import NotFoundError
from notes_api.storage.database import NoteRecord
from notes_api.storage.notes_store import (
    Note,
    _as_utc,
    _utc_now,
    clean_title,
    new_note_id,
    next_updated_at,
)

logger = logging.getLogger(__name__)


def _to_note(rec: NoteRecord) -> Note:
    return Note(
        id=rec.id,
        owner_id=rec.owner_id,
        title=rec.title,
        content=rec.content,
        created_at=_as_utc(rec.created_at),
        updated_at=_as_utc(rec.updated_at),
    )


class SqlNotesStore:
    """Relational note store. Every call runs in its own transaction."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def list_notes(self, owner_id: str) -> list[Note]:
        stmt = (
            select(NoteRecord)
            .where(NoteRecord.owner_id == owner_id)
            .order_by(NoteRecord.updated_at.desc(), NoteRecord.created_at.desc())
        )
        with self.session_factory() as session:
            return [_to_note(rec) for rec in session.scalars(stmt)]

    def get_note(self, owner_id: str, note_id: str) -> Optional[Note]:
        with self.session_factory() as session:
            rec = session.get(NoteRecord, note_id)
            if rec is None or rec.owner_id != owner_id:
                return None
            return _to_note(rec)

    def save_note(
        self, owner_id: str, note_id: Optional[str], title: str, content: str
    ) -> Note:
        title = clean_title(title)
        with self.session_factory() as session, session.begin():
            rec = session.get(NoteRecord, note_id) if note_id else None
            if rec is None:
                now = _utc_now()
                rec = NoteRecord(
                    id=new_note_id(),
                    owner_id=owner_id,
                    title=title,
                    content=content,
                    created_at=now,
                    updated_at=now,
                )
                session.add(rec)
                logger.info("Created note %s for %s", rec.id, owner_id)
            elif rec.owner_id != owner_id:
                raise NotFoundError()
            else:
                rec.title = title
                rec.content = content
                rec.updated_at = next_updated_at(rec.updated_at)
                logger.info("Updated note %s", rec.id)
            note = _to_note(rec)
        return note

    def delete_note(self, owner_id: str, note_id: str) -> None:
        with self.session_factory() as session, session.begin():
            rec = session.get(NoteRecord, note_id)
            if rec is None or rec.owner_id != owner_id:
                raise NotFoundError()
            session.delete(rec)
        logger.info("Deleted note %s", note_id)
