import pytest
from fastapi.testclient import TestClient

from maonamassa.core.config import Settings, get_settings
from maonamassa.database import get_store
from maonamassa.main import app
from maonamassa.repositories.record_store import InMemoryRecordStore

PASSWORD = "segredo123"


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def settings():
    return Settings(_env_file=None, JWT_SECRET="test-secret")


@pytest.fixture
def client(store, settings):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register a user and return (token, user)."""

    def _register(email: str, role: str = "client", password: str = PASSWORD):
        res = client.post(
            "/register",
            json={"email": email, "password": password, "role": role},
        )
        assert res.status_code == 201, res.text
        body = res.json()
        return body["token"], body["user"]

    return _register


@pytest.fixture
def contract(client, register):
    """A contract between a client (A) and a professional (B), plus a third user (C)."""
    token_a, user_a = register("ana@maonamassa.com.br", "client")
    token_b, user_b = register("bruno@maonamassa.com.br", "professional")
    token_c, _ = register("carla@maonamassa.com.br", "client")

    res = client.post(
        "/contracts",
        json={
            "professionalId": user_b["id"],
            "description": "Trocar chuveiro",
            "photos": [],
            "location": {"lat": -19.9167, "lon": -43.9345, "address": "Rua A, 10"},
        },
        headers=auth(token_a),
    )
    assert res.status_code == 201, res.text
    return {
        "record": res.json(),
        "client": token_a,
        "professional": token_b,
        "stranger": token_c,
        "client_id": user_a["id"],
        "professional_id": user_b["id"],
    }
