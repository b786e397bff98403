from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from notes_api.config import load_settings
from notes_api.errors import Unauthorized
from notes_api.models.auth import LoginRequest, RegisterRequest, SessionOut, TokenResponse
from notes_api.storage.users_store import UsersStore
from notes_api.utils.auth_hash import hash_password, verify_password
from notes_api.utils.jwt_auth import Identity, create_access_token, require_identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def get_users_store(request: Request) -> UsersStore:
    return request.app.state.users_store


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(req: RegisterRequest, users: UsersStore = Depends(get_users_store)) -> dict:
    users.create(req.user_id, hash_password(req.password))
    logger.info("Registered user %s", req.user_id)
    return {"user_id": req.user_id}


@router.post("/login", response_model=TokenResponse)
def login(
    req: LoginRequest,
    response: Response,
    users: UsersStore = Depends(get_users_store),
) -> TokenResponse:
    rec = users.get(req.user_id)
    matches, new_hash = (False, None) if rec is None else verify_password(req.password, rec.hashed_password)
    if not matches:
        logger.warning("Failed login for %s", req.user_id)
        raise Unauthorized("Invalid credentials")
    if new_hash is not None:
        users.set_password_hash(rec.user_id, new_hash)
        logger.info("Rehashed password for %s", rec.user_id)

    settings = load_settings()
    token = create_access_token(subject=rec.user_id)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.jwt_exp_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return TokenResponse(access_token=token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout() -> Response:
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(load_settings().session_cookie_name)
    return response


@router.get("/session", response_model=SessionOut)
def current_session(identity: Identity = Depends(require_identity)) -> SessionOut:
    return SessionOut(user_id=identity.user_id)
