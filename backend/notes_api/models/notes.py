from typing import Optional

from pydantic import BaseModel


class NoteSave(BaseModel):
    id: Optional[str] = None
    # blank titles are rejected by the handler so they come back as 400, not 422
    title: Optional[str] = None
    content: str = ""


class NoteOut(BaseModel):
    id: str
    title: str
    content: str
    createdAt: str
    updatedAt: str
