import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from folio.app import build_sessions, build_store, create_app
from folio.config import Settings

SECRET = "test-secret-key"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings pointing at a YAML store inside tmp_path.
    argon2 cost is turned down to the minimum so hashing doesn't dominate the suite.
    """
    return Settings(
        secret_key=SECRET,
        store_path=tmp_path / "data" / "folio.yml",
        hash_time_cost=1,
        hash_memory_cost=8,
        hash_parallelism=1,
    )


@pytest.fixture()
def store(settings):
    return build_store(settings)


@pytest.fixture()
def sessions(settings, store):
    return build_sessions(settings, store)


@pytest.fixture()
def app(settings, store):
    return create_app(settings, store=store)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def signup(client):
    """Sign up through the API and return (user_id, auth headers)."""

    def _signup(username: str = "alice", password: str = "s3cret"):
        r = client.post("/signup", json={"username": username, "password": password})
        assert r.status_code == 201, r.text
        body = r.json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['token']}"}

    return _signup
