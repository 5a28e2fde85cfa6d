import os
import sys
import tempfile
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

# Must be set before postboard.app is imported (module-level configuration).
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("POSTBOARD_UPLOAD_DIR", tempfile.mkdtemp(prefix="postboard-uploads-"))

from pathlib import Path

import mongomock
import pytest
from fastapi.testclient import TestClient

from postboard.auth.users import register_user
from postboard.infra import document_store
from postboard.services import upload_service

PASSWORD = "Abc123"


@pytest.fixture()
def db():
    """Fresh in-memory store per test, with the real unique indexes."""
    document_store.use_client(mongomock.MongoClient())
    yield document_store.get_db()
    document_store.use_client(None)


@pytest.fixture()
def upload_dir(tmp_path: Path, monkeypatch) -> Path:
    d = tmp_path / "uploads"
    monkeypatch.setattr(upload_service, "UPLOAD_DIR", d)
    return d


@pytest.fixture()
def client(db, upload_dir):
    from postboard.app import app

    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_user(db):
    def _make(username: str = "alice", email: str = "alice@example.com", password: str = PASSWORD):
        return register_user(username, email, password)

    return _make


def login(client: TestClient, email: str, password: str = PASSWORD):
    return client.post("/login", data={"email": email, "password": password}, follow_redirects=False)


@pytest.fixture()
def logged_in(client, make_user):
    """A client with an active session for 'alice'. Returns (client, user_doc)."""
    user = make_user()
    r = login(client, user["email"])
    assert r.status_code == 303
    return client, user


@pytest.fixture()
def lenient_client(db, upload_dir):
    """Client that receives the 500 page instead of re-raising server errors."""
    from postboard.app import app

    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


def no_files_in(d: Path) -> bool:
    return not d.exists() or not any(d.iterdir())
