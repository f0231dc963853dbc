import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import config
from app.core.chatbot import llm
from app.core.database import get_db
from app.main import app
from app.models import Base


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def offline_config(monkeypatch, tmp_path):
    """No test ever talks to a real LLM or Files API."""
    monkeypatch.setattr(config, "OPENAI_API_KEY", None)
    monkeypatch.setattr(config, "OPENROUTER_API_KEY", None)
    monkeypatch.setattr(config, "PREFERRED_LLM_BACKEND", None)
    monkeypatch.setattr(config, "UPLOAD_DIRECTORY", str(tmp_path / "uploads"))


@pytest.fixture
def client(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, email="alice@example.com", password="secret123", name="Alice"):
    response = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "name": name},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client):
    data = register(client)
    return {"user": data["user"], "headers": auth_headers(data["token"])}


@pytest.fixture
def bob(client):
    data = register(client, email="bob@example.com", name="Bob")
    return {"user": data["user"], "headers": auth_headers(data["token"])}


@pytest.fixture
def project(client, alice):
    response = client.post(
        "/api/projects",
        json={"name": "Support bot", "description": "Answers tickets", "systemPrompt": "You are a support agent."},
        headers=alice["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]["project"]


@pytest.fixture
def chat(client, alice, project):
    response = client.post(
        f"/api/chat/projects/{project['id']}/chats",
        json={"title": "First thread"},
        headers=alice["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]["chat"]


class FakeBackend(llm.LLMBackend):
    """Backend double recording every conversation it receives."""

    def __init__(self, name, configured=True, reply=None, error=None, usage=None):
        self.name = name
        self.configured = configured
        self.reply = reply if reply is not None else f"reply from {name}"
        self.error = error
        self.usage = usage
        self.calls = []

    def api_key(self):
        return "test-key" if self.configured else None

    def model(self):
        return f"{self.name}-model"

    def label(self):
        return f"Fake {self.name}"

    def complete(self, conversation):
        self.calls.append(conversation)
        if self.error:
            raise llm.LLMBackendError(self.error)
        return llm.AIReply(content=self.reply, label=self.label(), usage=self.usage)


@pytest.fixture
def fake_backends(monkeypatch):
    """Installs the given fake backends as the registry, in order."""
    def install(*backends):
        monkeypatch.setattr(llm, "BACKENDS", list(backends))
        return backends
    return install
