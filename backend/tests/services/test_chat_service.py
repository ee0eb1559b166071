from __future__ import annotations

import pytest

from app.provider.catalog import OPENROUTER_DEFAULT_MODEL
from app.provider.errors import InvalidCredentialFormatError, NoProviderAvailableError
from app.provider.normalizer import OPENROUTER_EMPTY_ADVISORY
from app.provider.types import ProviderId
from app.schemas import ChatRequest
from app.services.chat_service import build_parameters, collect_credentials, send_chat
from tests.utils import (
    DEEPSEEK_KEY,
    OPENAI_KEY,
    OPENROUTER_SERVER_KEY,
    FakeUpstream,
    completion_payload,
    make_settings,
)

DEEPSEEK_CHAT_URL = "https://deepseek.test/v1/chat/completions"
OPENROUTER_CHAT_URL = "https://openrouter.test/api/v1/chat/completions"


def _request(**overrides) -> ChatRequest:
    body = {
        "model": "deepseek-chat",
        "provider": "deepseek",
        "messages": [{"role": "user", "content": "Hello there"}],
    }
    body.update(overrides)
    return ChatRequest.model_validate(body)


def test_legacy_api_key_is_attributed_to_requested_provider():
    credentials = collect_credentials(_request(apiKey=DEEPSEEK_KEY))
    assert credentials[ProviderId.DEEPSEEK].valid


def test_credentials_map_wins_over_legacy_key():
    credentials = collect_credentials(
        _request(
            apiKey=DEEPSEEK_KEY,
            credentials={"deepseek": {"apiKey": DEEPSEEK_KEY, "verified": False}},
        )
    )
    assert not credentials[ProviderId.DEEPSEEK].valid


def test_build_parameters_applies_overrides_only():
    parameters = build_parameters(_request(temperature=1.5, max_tokens=200))
    assert parameters.temperature == 1.5
    assert parameters.max_tokens == 200
    assert parameters.presence_penalty == 0.0
    assert parameters.frequency_penalty == 0.0


@pytest.mark.asyncio
async def test_valid_deepseek_credential_sends_exact_model():
    upstream = FakeUpstream()
    upstream.add(
        "POST", DEEPSEEK_CHAT_URL, json_body=completion_payload("General Kenobi", model="deepseek-chat")
    )
    async with upstream.client() as client:
        response = await send_chat(
            _request(apiKey=DEEPSEEK_KEY), client=client, settings=make_settings()
        )

    assert upstream.last_json()["model"] == "deepseek-chat"
    assert response.provider is ProviderId.DEEPSEEK
    assert response.choices[0].message.content == "General Kenobi"
    assert response.message.content == "General Kenobi"
    assert response.routing.reason == "requested"
    assert response.id == "chatcmpl-test"


@pytest.mark.asyncio
async def test_openai_without_credential_falls_back_to_openrouter_server_key():
    upstream = FakeUpstream()
    upstream.add(
        "POST",
        OPENROUTER_CHAT_URL,
        json_body=completion_payload("Hi!", model=OPENROUTER_DEFAULT_MODEL),
    )
    settings = make_settings(openrouter_api_key=OPENROUTER_SERVER_KEY)
    async with upstream.client() as client:
        response = await send_chat(
            _request(model="gpt-4o", provider="openai"), client=client, settings=settings
        )

    assert response.provider is ProviderId.OPENROUTER
    assert response.model == OPENROUTER_DEFAULT_MODEL
    assert response.routing.reason == "openrouter_fallback"
    assert upstream.requests[0].headers["Authorization"] == f"Bearer {OPENROUTER_SERVER_KEY}"
    assert upstream.last_json()["model"] == OPENROUTER_DEFAULT_MODEL


@pytest.mark.asyncio
async def test_no_provider_available_makes_zero_network_calls():
    upstream = FakeUpstream()
    async with upstream.client() as client:
        with pytest.raises(NoProviderAvailableError):
            await send_chat(
                _request(model="gpt-4o", provider="openai"), client=client, settings=make_settings()
            )
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_malformed_legacy_key_is_reported_before_routing():
    upstream = FakeUpstream()
    async with upstream.client() as client:
        with pytest.raises(InvalidCredentialFormatError):
            await send_chat(
                _request(model="gpt-4o", provider="openai", apiKey="sk-too-short"),
                client=client,
                settings=make_settings(openrouter_api_key=OPENROUTER_SERVER_KEY),
            )
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_degenerate_openrouter_reply_is_replaced():
    upstream = FakeUpstream()
    upstream.add(
        "POST",
        OPENROUTER_CHAT_URL,
        json_body=completion_payload("HelloHelloHelloHelloHelloHello", model=OPENROUTER_DEFAULT_MODEL),
    )
    settings = make_settings(openrouter_api_key=OPENROUTER_SERVER_KEY)
    async with upstream.client() as client:
        response = await send_chat(
            _request(model=OPENROUTER_DEFAULT_MODEL, provider="openrouter"),
            client=client,
            settings=settings,
        )

    assert response.message.content == OPENROUTER_EMPTY_ADVISORY
    assert response.issue == "degenerate_content"


@pytest.mark.asyncio
async def test_image_request_uses_openai_vision_model():
    upstream = FakeUpstream()
    upstream.add(
        "POST",
        "https://openai.test/v1/chat/completions",
        json_body=completion_payload("A tabby cat.", model="gpt-4o"),
    )
    request = _request(
        apiKey=OPENAI_KEY,
        provider="openai",
        model="gpt-3.5-turbo",
        messages=[
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "What is this?"},
                    {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}},
                ],
            }
        ],
    )
    async with upstream.client() as client:
        response = await send_chat(request, client=client, settings=make_settings())

    assert response.routing.effective_model == "gpt-4o"
    assert response.routing.reason == "image_override"
    body = upstream.last_json()
    assert body["model"] == "gpt-4o"
    assert body["messages"][-1]["content"][1]["type"] == "image_url"
