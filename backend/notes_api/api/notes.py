from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from pydantic import ValidationError as SchemaError

from notes_api.errors import ValidationError
from notes_api.models.notes import NoteOut, NoteSave
from notes_api.storage.notes_store import NotesStore
from notes_api.utils.jwt_auth import Identity, require_identity

router = APIRouter(prefix="/notes", tags=["notes"])

_SAVE_BODY = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": NoteSave.model_json_schema()}},
    }
}


def get_notes_store(request: Request) -> NotesStore:
    return request.app.state.notes_store


async def read_note_save(
    request: Request,
    identity: Identity = Depends(require_identity),
) -> NoteSave:
    """Parse the body only once the caller is known, so anonymous requests get 401 whatever they send."""
    try:
        return NoteSave.model_validate_json(await request.body())
    except SchemaError as exc:
        raise ValidationError("Invalid request") from exc


@router.get("", response_model=list[NoteOut])
def list_notes(
    identity: Identity = Depends(require_identity),
    store: NotesStore = Depends(get_notes_store),
) -> list[NoteOut]:
    notes = store.list_notes(owner_id=identity.user_id)
    return [NoteOut(**n.to_dict()) for n in notes]


@router.post("", response_model=NoteOut, openapi_extra=_SAVE_BODY)
def save_note(
    payload: NoteSave = Depends(read_note_save),
    identity: Identity = Depends(require_identity),
    store: NotesStore = Depends(get_notes_store),
) -> NoteOut:
    """Create the note, or update it in place when ``id`` names one of the caller's notes."""
    if payload.title is None or not payload.title.strip():
        raise ValidationError("Title is required")

    note = store.save_note(
        owner_id=identity.user_id,
        note_id=payload.id or None,
        title=payload.title,
        content=payload.content,
    )
    return NoteOut(**note.to_dict())


@router.delete("", status_code=204)
def delete_note(
    note_id: Optional[str] = Query(default=None, alias="id"),
    identity: Identity = Depends(require_identity),
    store: NotesStore = Depends(get_notes_store),
) -> Response:
    if not note_id:
        raise ValidationError("Missing id")

    store.delete_note(owner_id=identity.user_id, note_id=note_id)
    return Response(status_code=204)
