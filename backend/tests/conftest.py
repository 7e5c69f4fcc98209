"""Pytest fixtures — a fresh in-memory store per test, seeded through the app lifespan."""
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.services.store import Store

ADMIN_EMAIL = "admin@respect.com"
ADMIN_PASSWORD = "admin123"
MARIA_EMAIL = "maria@respect.com"
JUAN_EMAIL = "juan@respect.com"
EMPLOYEE_PASSWORD = "empleado123"


@pytest.fixture(scope="function")
def settings(tmp_path):
    """Test settings: in-memory DB, cheap bcrypt, throwaway upload dir."""
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET="test-secret",
        BCRYPT_ROUNDS=4,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        SEED_ON_STARTUP=True,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture(scope="function")
def client(settings):
    """FastAPI TestClient; entering the context runs the lifespan (store + seed)."""
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def store(client) -> Store:
    """The seeded store behind ``client``."""
    return client.app.state.store


@pytest.fixture(scope="function")
def empty_store():
    """A standalone, unseeded store."""
    s = Store("sqlite://")
    yield s
    s.close()


@pytest.fixture
def admin_headers(client):
    return auth_headers(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def maria_headers(client):
    return auth_headers(client, MARIA_EMAIL, EMPLOYEE_PASSWORD)


@pytest.fixture
def juan_headers(client):
    return auth_headers(client, JUAN_EMAIL, EMPLOYEE_PASSWORD)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def login(client: TestClient, email: str, password: str) -> dict:
    """Helper — POST /api/auth/login and return response JSON."""
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()


def auth_headers(client: TestClient, email: str, password: str) -> dict:
    token = login(client, email, password)["token"]
    return {"Authorization": f"Bearer {token}"}


def seeded_event(client: TestClient, headers: dict) -> dict:
    """Helper — the seeded "EtMday" event as returned by GET /api/events/."""
    resp = client.get("/api/events/", headers=headers)
    assert resp.status_code == 200, resp.text
    return next(e for e in resp.json() if e["name"] == "EtMday")


def seeded_attribute(client: TestClient, headers: dict, name: str) -> dict:
    event = seeded_event(client, headers)
    return next(a for a in event["attributes"] if a["name"] == name)


def user_id_by_email(store: Store, email: str) -> str:
    return store.get_user_by_email(email)["id"]
