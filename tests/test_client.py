import pytest

from app.client import ApiError, ApiSession, ChatbotPlatformClient, SessionExpiredError
from app.core.chatbot.fallback import FALLBACK_LABEL


@pytest.fixture
def api(client):
    return ChatbotPlatformClient("http://testserver", session=ApiSession(), http=client)


def test_register_starts_session_and_attaches_token(api):
    user = api.register("erin@example.com", "secret123", "Erin")
    assert api.session.is_authenticated
    assert api.session.user["id"] == user["id"]
    assert api.me()["id"] == user["id"]


def test_full_conversation_flow(api):
    api.register("erin@example.com", "secret123")
    project = api.create_project("Tutor", "You teach algebra.", description="Math help")
    chat = api.create_chat(project["id"], title="Lesson 1")

    result = api.send_message(chat["id"], "What is x if 2x = 4?")
    assert result["metadata"]["backendLabel"] == FALLBACK_LABEL

    messages = api.list_messages(chat["id"])
    assert [m["role"] for m in messages] == ["user", "assistant"]
    assert [c["id"] for c in api.list_chats(project["id"])] == [chat["id"]]
    assert api.get_project(project["id"])["name"] == "Tutor"
    assert api.update_project(project["id"], name="Algebra tutor")["name"] == "Algebra tutor"
    assert api.list_files(project["id"]) == []

    api.delete_project(project["id"])
    assert api.list_projects() == []


def test_401_clears_session(api):
    api.session.start("stale-token", {"id": "gone"})
    with pytest.raises(SessionExpiredError):
        api.list_projects()
    assert not api.session.is_authenticated
    assert api.session.user is None


def test_error_envelope_raises_api_error(api):
    api.register("erin@example.com", "secret123")
    with pytest.raises(ApiError) as excinfo:
        api.get_project("missing")
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Project not found"
    assert api.session.is_authenticated


def test_login_after_logout(api):
    api.register("erin@example.com", "secret123")
    api.logout()
    assert not api.session.is_authenticated
    api.login("erin@example.com", "secret123")
    assert api.session.is_authenticated


def test_health(api):
    assert api.health()["success"] is True
