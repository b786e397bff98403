"""
Personal notes API: application factory.

Stores are created on startup from ``NOTES_DATABASE_URL`` unless they are
passed in, which is how tests swap in the in-memory note store.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from notes_api.api.auth import router as auth_router
from notes_api.api.notes import router as notes_router
from notes_api.config import Settings, load_settings
from notes_api.errors import NotesError, Unauthorized
from notes_api.storage.database import create_db_engine, init_db
from notes_api.storage.notes_store import NotesStore
from notes_api.storage.sql_notes_store import SqlNotesStore
from notes_api.storage.users_store import UsersStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    engine = None
    if app.state.notes_store is None or app.state.users_store is None:
        engine = create_db_engine(settings.database_url)
        session_factory = init_db(engine)
        if app.state.notes_store is None:
            app.state.notes_store = SqlNotesStore(session_factory)
        if app.state.users_store is None:
            app.state.users_store = UsersStore(session_factory)
        logger.info("%s started on %s", settings.app_name, engine.url.get_backend_name())
    yield
    if engine is not None:
        engine.dispose()


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotesError)
    async def notes_error_handler(request: Request, exc: NotesError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
        return JSONResponse({"detail": exc.message}, status_code=exc.status_code, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse({"detail": "Invalid request"}, status_code=400)

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage failure on %s %s", request.method, request.url.path)
        return JSONResponse({"detail": "Internal server error"}, status_code=500)


def create_app(
    settings: Optional[Settings] = None,
    notes_store: Optional[NotesStore] = None,
    users_store: Optional[UsersStore] = None,
) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Personal Notes API", lifespan=lifespan)
    app.state.settings = settings
    app.state.notes_store = notes_store
    app.state.users_store = users_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(notes_router)

    @app.get("/health")
    def health():
        return {"ok": True, "app": settings.app_name}

    return app


app = create_app()
