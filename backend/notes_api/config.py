from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Base data dir: repository_root/data (we are in backend/notes_api/)
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[2] / "data"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_log_level(name: str, default: str = "INFO") -> str:
    level = os.getenv(name, default).strip().upper()
    # getLevelName maps known names to ints and anything else to "Level x"
    if isinstance(logging.getLevelName(level), int):
        return level
    return default


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class Settings:
    app_name: str
    database_url: str
    jwt_secret: str
    jwt_algorithm: str
    jwt_exp_minutes: int
    session_cookie_name: str
    session_cookie_secure: bool
    cors_origins: tuple[str, ...]
    log_level: str
    bcrypt_rounds: Optional[int]


def load_settings() -> Settings:
    """Read settings from the environment.

    Called at app creation and by the token helpers, so tests can change
    env vars with monkeypatch without reloading modules.
    """
    default_db = f"sqlite:///{DEFAULT_DATA_DIR / 'notes.db'}"
    origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    return Settings(
        app_name=os.getenv("APP_NAME", "personal-notes"),
        database_url=os.getenv("NOTES_DATABASE_URL", default_db),
        jwt_secret=os.getenv("JWT_SECRET", ""),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_exp_minutes=_env_int("JWT_EXP_MINUTES", 60),
        session_cookie_name=os.getenv("SESSION_COOKIE_NAME", "session"),
        session_cookie_secure=_env_bool("SESSION_COOKIE_SECURE", False),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        log_level=_env_log_level("LOG_LEVEL"),
        bcrypt_rounds=_env_optional_int("BCRYPT_ROUNDS"),
    )
