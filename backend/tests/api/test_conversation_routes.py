from __future__ import annotations

import uuid

from sqlalchemy.exc import IntegrityError


def _create(client, **payload):
    body = {"model": "gpt-4o", **payload}
    resp = client.post("/api/conversations", json=body)
    assert resp.status_code == 201
    return resp.json()


def test_create_derives_title_from_first_prompt(client):
    data = _create(client, firstPrompt="How do I bake sourdough bread at home?")
    assert data["title"] == "How do I bake sourdough..."
    assert data["model"] == "gpt-4o"
    uuid.UUID(data["id"])


def test_create_requires_model(client):
    resp = client.post("/api/conversations", json={"title": "no model"})
    assert resp.status_code == 422


def test_list_conversations_newest_first(client):
    older = _create(client, title="older")
    newer = _create(client, title="newer")

    resp = client.get("/api/conversations")
    assert resp.status_code == 200
    assert [item["id"] for item in resp.json()] == [newer["id"], older["id"]]


def test_get_conversation_with_messages(client):
    conversation = _create(client, title="chat")
    user_resp = client.post(
        f"/api/conversations/{conversation['id']}/messages",
        json={"role": "user", "content": "What's the weather like on Mars?"},
    )
    assert user_resp.status_code == 201
    assistant_resp = client.post(
        f"/api/conversations/{conversation['id']}/messages",
        json={
            "role": "assistant",
            "content": "Cold and dusty.",
            "provider": "openai",
            "model": "gpt-4o",
        },
    )
    assert assistant_resp.status_code == 201
    assert assistant_resp.json()["provider"] == "openai"

    resp = client.get(f"/api/conversations/{conversation['id']}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "chat"
    assert [m["role"] for m in data["messages"]] == ["user", "assistant"]
    assert data["messages"][0]["content"] == "What's the weather like on Mars?"
    assert data["messages"][1]["model"] == "gpt-4o"


def test_multimodal_message_round_trips(client):
    conversation = _create(client)
    content = [
        {"type": "text", "text": "what is this"},
        {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}},
    ]
    resp = client.post(
        f"/api/conversations/{conversation['id']}/messages",
        json={"role": "user", "content": content},
    )
    assert resp.status_code == 201
    assert resp.json()["content"] == content


def test_get_missing_conversation_returns_404(client):
    resp = client.get(f"/api/conversations/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["detail"]["error"] == "not_found"


def test_append_to_missing_conversation_returns_404(client):
    resp = client.post(
        f"/api/conversations/{uuid.uuid4()}/messages",
        json={"role": "user", "content": "hello?"},
    )
    assert resp.status_code == 404


def test_sequence_conflict_returns_409(client, monkeypatch):
    conversation = _create(client)

    def _duplicate_sequence(db, *, message):
        raise IntegrityError("INSERT INTO messages", {}, Exception("duplicate sequence"))

    monkeypatch.setattr(
        "app.services.conversation_service.repo_add_message", _duplicate_sequence
    )

    resp = client.post(
        f"/api/conversations/{conversation['id']}/messages",
        json={"role": "user", "content": "hello"},
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["error"] == "conflict"


def test_invalid_role_is_rejected(client):
    conversation = _create(client)
    resp = client.post(
        f"/api/conversations/{conversation['id']}/messages",
        json={"role": "tool", "content": "hello"},
    )
    assert resp.status_code == 422


def test_delete_conversation_is_idempotent(client):
    conversation = _create(client)

    first = client.delete(f"/api/conversations/{conversation['id']}")
    second = client.delete(f"/api/conversations/{conversation['id']}")

    assert first.status_code == 204
    assert second.status_code == 204
    assert client.get(f"/api/conversations/{conversation['id']}").status_code == 404


def test_delete_all_conversations(client):
    _create(client, title="one")
    _create(client, title="two")

    resp = client.delete("/api/conversations")

    assert resp.status_code == 204
    assert client.get("/api/conversations").json() == []
