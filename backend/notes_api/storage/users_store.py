from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from notes_api.errors import ConflictError
from notes_api.storage.database import UserRecord


@dataclass(frozen=True)
class User:
    user_id: str
    hashed_password: str
    created_at: datetime


class UsersStore:
    """Accounts of the built-in identity provider."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get(self, user_id: str) -> Optional[User]:
        with self.session_factory() as session:
            rec = session.get(UserRecord, user_id)
            if rec is None:
                return None
            return User(
                user_id=rec.user_id,
                hashed_password=rec.hashed_password,
                created_at=rec.created_at,
            )

    def create(self, user_id: str, hashed_password: str) -> User:
        user = User(
            user_id=user_id,
            hashed_password=hashed_password,
            created_at=datetime.now(timezone.utc),
        )
        try:
            with self.session_factory() as session, session.begin():
                session.add(UserRecord(**user.__dict__))
        except IntegrityError as exc:
            raise ConflictError("User exists") from exc
        return user

    def set_password_hash(self, user_id: str, hashed_password: str) -> None:
        with self.session_factory() as session, session.begin():
            rec = session.get(UserRecord, user_id)
            if rec is not None:
                rec.hashed_password = hashed_password
