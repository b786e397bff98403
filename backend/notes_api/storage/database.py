from __future__ import annotations

from pathlib import Path

from sqlalchemy import Column, DateTime, Index, String, Text, create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


class NoteRecord(Base):
    __tablename__ = "notes"

    id = Column(String(36), primary_key=True)
    # no FK to users: owners may come from any token issuer
    owner_id = Column(String(255), nullable=False)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_notes_owner_updated", "owner_id", "updated_at"),)


class UserRecord(Base):
    __tablename__ = "users"

    user_id = Column(String(64), primary_key=True)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


def create_db_engine(database_url: str) -> Engine:
    """Engine for ``database_url``; SQLite files get their directory created."""
    url = make_url(database_url)
    kwargs: dict = {}
    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            # one shared connection, otherwise each session sees an empty db
            kwargs["poolclass"] = StaticPool
        else:
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, **kwargs)


def init_db(engine: Engine) -> sessionmaker:
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
