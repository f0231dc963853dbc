from app.core import config
from app.core.chatbot.fallback import FALLBACK_LABEL
from app.models.file import File as FileModel
from app.models.message import Message
from conftest import FakeBackend


def send(client, user, chat, content, **extra):
    return client.post(
        f"/api/chat/chats/{chat['id']}/messages",
        json={"content": content, **extra},
        headers=user["headers"],
    )


def test_create_chat_defaults_title(client, alice, project):
    response = client.post(f"/api/chat/projects/{project['id']}/chats", headers=alice["headers"])
    assert response.status_code == 201
    assert response.json()["data"]["chat"]["title"] == "New Chat"
    assert response.json()["data"]["chat"]["projectId"] == project["id"]


def test_create_chat_in_foreign_project_is_404(client, bob, project):
    response = client.post(f"/api/chat/projects/{project['id']}/chats", json={}, headers=bob["headers"])
    assert response.status_code == 404


def test_list_chats(client, alice, project, chat):
    response = client.get(f"/api/chat/projects/{project['id']}/chats", headers=alice["headers"])
    assert [c["id"] for c in response.json()["data"]["chats"]] == [chat["id"]]


def test_send_message_uses_backend_reply(client, alice, chat, fake_backends):
    (openai,) = fake_backends(FakeBackend(
        "openai", reply="Hi there!",
        usage={"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
    ))

    response = send(client, alice, chat, "  Hello bot  ")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["userMessage"]["role"] == "user"
    assert data["userMessage"]["content"] == "Hello bot"
    assert data["assistantMessage"]["role"] == "assistant"
    assert data["assistantMessage"]["content"] == "Hi there!"
    assert data["metadata"] == {
        "backendLabel": "Fake openai",
        "tokenUsage": {"promptTokens": 12, "completionTokens": 3, "totalTokens": 15},
    }

    conversation = openai.calls[0]
    assert conversation[0] == {"role": "system", "content": "You are a support agent."}
    assert conversation[-1] == {"role": "user", "content": "Hello bot"}


def test_send_message_writes_one_user_then_one_assistant_row(client, alice, chat, db_session, fake_backends):
    fake_backends(FakeBackend("openai", error="boom"))

    send(client, alice, chat, "first")
    send(client, alice, chat, "second")

    rows = db_session.query(Message).order_by(Message.id).all()
    assert [r.role for r in rows] == ["user", "assistant", "user", "assistant"]
    assert rows[0].content == "first"
    assert rows[2].content == "second"


def test_all_backends_failing_still_succeeds_with_fallback(client, alice, chat, fake_backends):
    openai, openrouter = fake_backends(
        FakeBackend("openai", error="timeout"),
        FakeBackend("openrouter", error="HTTP 500"),
    )

    response = send(client, alice, chat, "What is the refund policy?")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["metadata"] == {"backendLabel": FALLBACK_LABEL, "tokenUsage": None}
    assert data["assistantMessage"]["content"]
    assert "Note: I'm configured as: You are a support agent." in data["assistantMessage"]["content"]
    assert len(openai.calls) == 1
    assert len(openrouter.calls) == 1


def test_no_configured_backend_uses_fallback_without_attempts(client, alice, chat, fake_backends):
    openai, openrouter = fake_backends(
        FakeBackend("openai", configured=False),
        FakeBackend("openrouter", configured=False),
    )

    response = send(client, alice, chat, "hello")
    assert response.json()["data"]["metadata"]["backendLabel"] == FALLBACK_LABEL
    assert openai.calls == []
    assert openrouter.calls == []


def test_unconfigured_keys_fall_back_with_real_registry(client, alice, chat):
    # conftest clears both API keys
    response = send(client, alice, chat, "hello")
    assert response.status_code == 200
    assert response.json()["data"]["metadata"]["backendLabel"] == FALLBACK_LABEL


def test_preferred_backend_is_attempted_first(client, alice, chat, fake_backends):
    openai, openrouter = fake_backends(FakeBackend("openai"), FakeBackend("openrouter"))

    response = send(client, alice, chat, "hello", preferredBackend="openrouter")
    assert response.json()["data"]["metadata"]["backendLabel"] == "Fake openrouter"
    assert len(openrouter.calls) == 1
    assert openai.calls == []


def test_preferred_backend_from_config(client, alice, chat, fake_backends, monkeypatch):
    openai, openrouter = fake_backends(FakeBackend("openai"), FakeBackend("openrouter"))
    monkeypatch.setattr(config, "PREFERRED_LLM_BACKEND", "openrouter")

    send(client, alice, chat, "hello")
    assert len(openrouter.calls) == 1
    assert openai.calls == []


def test_fallback_order_backend_only_after_preferred_fails(client, alice, chat, fake_backends):
    openai, openrouter = fake_backends(FakeBackend("openai"), FakeBackend("openrouter", error="down"))

    response = send(client, alice, chat, "hello", preferredBackend="openrouter")
    assert response.json()["data"]["metadata"]["backendLabel"] == "Fake openai"
    assert len(openrouter.calls) == 1
    assert len(openai.calls) == 1


def test_context_window_is_bounded(client, alice, chat, fake_backends):
    (openai,) = fake_backends(FakeBackend("openai"))

    for i in range(8):
        send(client, alice, chat, f"message {i}")

    conversation = openai.calls[-1]
    # system prompt + 10 prior messages + the new message
    assert len(conversation) == 12
    assert conversation[0]["role"] == "system"
    history = conversation[1:-1]
    assert history[0] == {"role": "user", "content": "message 2"}
    assert history[-1] == {"role": "assistant", "content": "reply from openai"}
    assert conversation[-1] == {"role": "user", "content": "message 7"}


def test_file_ids_add_context_to_system_prompt(client, alice, project, chat, db_session, fake_backends):
    (openai,) = fake_backends(FakeBackend("openai"))
    db_session.add(FileModel(
        id="f1", filename="f1_guide.pdf", original_name="guide.pdf", mime_type="application/pdf",
        size=10, status="processed", openai_file_id="file-abc", project_id=project["id"],
    ))
    db_session.commit()

    send(client, alice, chat, "summarize", fileIds=["file-abc", "file-unknown"])

    system = openai.calls[0][0]["content"]
    assert system.startswith("You are a support agent.")
    assert "uploaded 1 file(s)" in system
    assert "- guide.pdf (application/pdf)" in system


def test_empty_message_is_rejected(client, alice, chat, db_session):
    response = send(client, alice, chat, "   ")
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Message content is required"}
    assert db_session.query(Message).count() == 0


def test_send_to_foreign_chat_is_404(client, bob, chat, db_session):
    response = send(client, bob, chat, "hello")
    assert response.status_code == 404
    assert response.json()["message"] == "Chat not found"
    assert db_session.query(Message).count() == 0


def test_messages_listed_in_chronological_order(client, alice, chat, fake_backends):
    fake_backends(FakeBackend("openai"))
    send(client, alice, chat, "one")
    send(client, alice, chat, "two")

    response = client.get(f"/api/chat/chats/{chat['id']}/messages", headers=alice["headers"])
    messages = response.json()["data"]["messages"]
    assert [(m["role"], m["content"]) for m in messages] == [
        ("user", "one"),
        ("assistant", "reply from openai"),
        ("user", "two"),
        ("assistant", "reply from openai"),
    ]


def test_list_messages_of_foreign_chat_is_404(client, bob, chat):
    response = client.get(f"/api/chat/chats/{chat['id']}/messages", headers=bob["headers"])
    assert response.status_code == 404
