import os

# Settings are read at import time of careerspage.main
os.environ["JWT_SECRET"] = "test-secret-for-careerspage"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("GOOGLE_API_KEY", None)

import pytest
from fastapi.testclient import TestClient

from careerspage.core.config import Settings
from careerspage.db.database import build_engine, build_session_factory, init_db
from careerspage.main import create_app
from careerspage.services.persistence import HandlerContext
from careerspage.storage.db_binary import DatabaseBlobStorage

TEST_SECRET = "test-secret-for-careerspage"
DEFAULT_PASSWORD = "password123"


class FakeTextGateway:
    """Stands in for Gemini: returns canned replies and records every call."""

    def __init__(self, reply="Enhanced text"):
        self.reply = reply
        self.calls = []

    async def generate(self, prompt, variables):
        self.calls.append((prompt, variables))
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://", JWT_SECRET=TEST_SECRET, GOOGLE_API_KEY=None)


@pytest.fixture
def fake_ai():
    return FakeTextGateway()


@pytest.fixture
def app(settings, fake_ai):
    app = create_app(settings)
    app.state.ai = fake_ai
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def db_session(settings):
    engine = build_engine("sqlite://")
    session_factory = build_session_factory(engine)
    init_db(engine, session_factory, settings.STORAGE_BUCKET)
    db = session_factory()
    yield db
    db.close()
    engine.dispose()


@pytest.fixture
def ctx(db_session, settings, fake_ai):
    return HandlerContext(
        db=db_session,
        settings=settings,
        storage=DatabaseBlobStorage(db_session, settings.PUBLIC_BASE_URL),
        ai=fake_ai,
    )


def send(client, step, payload=None, token=None, legacy=False):
    """Posts one event and returns the raw response."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    path = "/api/legacy/event" if legacy else "/api/event"
    return client.post(path, json={"step": step, "payload": payload or {}}, headers=headers)


@pytest.fixture
def register(client):
    """Registers an account and returns (token, user)."""
    def _register(email, password=DEFAULT_PASSWORD, name=None):
        metadata = {"name": name} if name else None
        response = send(client, "AUTH_REGISTER", {"email": email, "password": password, "metadata": metadata})
        assert response.status_code == 200, response.json()
        data = response.json()["data"]
        return data["token"], data["user"]
    return _register


@pytest.fixture
def owner(register):
    return register("owner@example.com", name="Owner")


@pytest.fixture
def company(client, owner):
    token, _ = owner
    response = send(client, "CREATE_COMPANY", {"name": "Acme", "slug": "acme"}, token)
    assert response.status_code == 200, response.json()
    return response.json()["data"]
