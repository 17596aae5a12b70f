from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

# Must be set before clinic.db creates the engine
_TMP_DIR = tempfile.mkdtemp(prefix="clinic-tests-")
os.environ["CLINIC_DATABASE_URL"] = f"sqlite:///{Path(_TMP_DIR) / 'test.sqlite'}"
os.environ.setdefault("JWT_SECRET", "test-secret")

from fastapi.testclient import TestClient  # noqa: E402

from clinic.api_main import app  # noqa: E402
from clinic.db import Base, engine  # noqa: E402
from clinic.services import init_db  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_db():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_client(client):
    """TestClient carrying a bearer token for a registered staff user."""
    r = client.post(
        "/api/register",
        json={"firstName": "Ada", "lastName": "Lovelace", "email": "ada@clinic.test", "password": "secret1"},
    )
    assert r.status_code == 200
    r = client.post("/api/login", json={"email": "ada@clinic.test", "password": "secret1"})
    assert r.status_code == 200
    client.headers["Authorization"] = f"Bearer {r.json()['access_token']}"
    return client
