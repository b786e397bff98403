import pytest
from fastapi.testclient import TestClient

from notes_api.main import create_app
from notes_api.storage.database import create_db_engine, init_db
from notes_api.storage.notes_store import InMemoryNotesStore
from notes_api.storage.sql_notes_store import SqlNotesStore
from notes_api.utils.jwt_auth import create_access_token


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    # isolate the database and token secret per test
    monkeypatch.setenv("NOTES_DATABASE_URL", f"sqlite:///{tmp_path / 'notes.db'}")
    monkeypatch.setenv("JWT_SECRET", "dev-secret-for-tests")
    monkeypatch.setenv("JWT_EXP_MINUTES", "15")
    monkeypatch.setenv("SESSION_COOKIE_NAME", "session")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")


@pytest.fixture()
def client():
    with TestClient(create_app()) as c:
        yield c


@pytest.fixture()
def memory_store():
    return InMemoryNotesStore()


@pytest.fixture()
def memory_client(memory_store):
    with TestClient(create_app(notes_store=memory_store)) as c:
        yield c


@pytest.fixture()
def auth_headers():
    def make(user_id: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return make


@pytest.fixture(params=["memory", "sql"])
def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryNotesStore()
        return
    engine = create_db_engine(f"sqlite:///{tmp_path / 'store.db'}")
    yield SqlNotesStore(init_db(engine))
    engine.dispose()
