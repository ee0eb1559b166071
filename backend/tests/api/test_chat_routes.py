from __future__ import annotations

from app.provider.catalog import OPENROUTER_DEFAULT_MODEL
from tests.utils import DEEPSEEK_KEY, OPENAI_KEY, OPENROUTER_KEY, completion_payload

OPENAI_MODELS_URL = "https://openai.test/v1/models"
DEEPSEEK_MODELS_URL = "https://deepseek.test/v1/models"
DEEPSEEK_CHAT_URL = "https://deepseek.test/v1/chat/completions"
OPENROUTER_MODELS_URL = "https://openrouter.test/api/v1/models"
OPENROUTER_CHAT_URL = "https://openrouter.test/api/v1/chat/completions"


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_validate_key_returns_preference_update(client, upstream):
    upstream.add("GET", OPENAI_MODELS_URL, json_body={"data": []})

    resp = client.post(
        "/api/validate-key", json={"apiKey": OPENAI_KEY, "currentProvider": "openrouter"}
    )

    assert resp.status_code == 200
    assert resp.json() == {
        "valid": True,
        "preference": {"provider": "openai", "model": "gpt-3.5-turbo"},
    }


def test_validate_deepseek_key_with_bad_format_skips_network(client, upstream):
    resp = client.post("/api/validate-deepseek-key", json={"apiKey": "sk-short"})

    assert resp.status_code == 200
    assert resp.json() == {"valid": False, "preference": None}
    assert upstream.requests == []


def test_validate_openrouter_key_rejected_upstream(client, upstream):
    upstream.add("GET", OPENROUTER_MODELS_URL, status_code=401, json_body={"error": "nope"})

    resp = client.post("/api/validate-openrouter-key", json={"apiKey": OPENROUTER_KEY})

    assert resp.status_code == 200
    assert resp.json()["valid"] is False


def test_validate_key_requires_api_key_field(client):
    resp = client.post("/api/validate-key", json={})
    assert resp.status_code == 422


def test_verify_openrouter_without_server_key(client, upstream):
    resp = client.get("/api/verify-openrouter")

    assert resp.status_code == 200
    assert resp.json() == {"connected": False}
    assert upstream.requests == []


def test_chat_with_valid_deepseek_key(client, upstream):
    upstream.add(
        "POST",
        DEEPSEEK_CHAT_URL,
        json_body=completion_payload("Bonjour!", model="deepseek-chat"),
    )

    resp = client.post(
        "/api/chat",
        json={
            "apiKey": DEEPSEEK_KEY,
            "model": "deepseek-chat",
            "provider": "deepseek",
            "messages": [{"role": "user", "content": "Say hello in French"}],
            "temperature": 0.3,
        },
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["object"] == "chat.completion"
    assert data["provider"] == "deepseek"
    assert data["model"] == "deepseek-chat"
    assert data["choices"][0]["message"]["content"] == "Bonjour!"
    assert data["message"] == {
        "role": "assistant",
        "content": "Bonjour!",
        "provider": "deepseek",
        "model": "deepseek-chat",
    }
    assert data["routing"]["effective_provider"] == "deepseek"
    assert upstream.last_json()["temperature"] == 0.3


def test_chat_without_any_credential_returns_actionable_error(client, upstream):
    resp = client.post(
        "/api/chat",
        json={
            "model": "gpt-4o",
            "provider": "openai",
            "messages": [{"role": "user", "content": "hi"}],
        },
    )

    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["error"] == "no_provider_available"
    assert detail["message"].startswith("OpenAI Error: Valid OpenAI API key required")
    assert upstream.requests == []


def test_chat_with_image_but_no_openai_key(client, upstream):
    resp = client.post(
        "/api/chat",
        json={
            "model": "deepseek-chat",
            "provider": "deepseek",
            "credentials": {"deepseek": {"apiKey": DEEPSEEK_KEY, "verified": True}},
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": "what is this"},
                        {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}},
                    ],
                }
            ],
        },
    )

    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["error"] == "provider_unavailable"
    assert detail["provider"] == "openai"
    assert upstream.requests == []


def test_chat_with_user_openrouter_credential(client, upstream):
    upstream.add(
        "POST",
        OPENROUTER_CHAT_URL,
        json_body=completion_payload("", model=OPENROUTER_DEFAULT_MODEL),
    )

    resp = client.post(
        "/api/chat",
        json={
            "model": "deepseek-v3-base",
            "provider": "openrouter",
            "credentials": {"openrouter": {"apiKey": OPENROUTER_KEY, "verified": True}},
            "messages": [{"role": "user", "content": "hi"}],
        },
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["routing"]["effective_model"] == OPENROUTER_DEFAULT_MODEL
    assert data["routing"]["use_server_credential"] is False
    assert data["issue"] == "empty_content"
    assert data["message"]["content"]
    assert upstream.requests[0].headers["Authorization"] == f"Bearer {OPENROUTER_KEY}"


def test_chat_upstream_rate_limit_maps_to_429(client, upstream):
    upstream.add(
        "POST",
        DEEPSEEK_CHAT_URL,
        status_code=429,
        json_body={"error": {"message": "Too many requests"}},
    )

    resp = client.post(
        "/api/chat",
        json={
            "apiKey": DEEPSEEK_KEY,
            "model": "deepseek-chat",
            "provider": "deepseek",
            "messages": [{"role": "user", "content": "hi"}],
        },
    )

    assert resp.status_code == 429
    assert resp.json()["detail"]["error"] == "rate_limited"


def test_chat_rejects_out_of_range_parameters(client):
    resp = client.post(
        "/api/chat",
        json={
            "model": "deepseek-chat",
            "provider": "deepseek",
            "messages": [{"role": "user", "content": "hi"}],
            "max_tokens": 5000,
        },
    )
    assert resp.status_code == 422


def test_chat_rejects_unknown_provider(client):
    resp = client.post(
        "/api/chat",
        json={
            "model": "claude-3",
            "provider": "anthropic",
            "messages": [{"role": "user", "content": "hi"}],
        },
    )
    assert resp.status_code == 422
