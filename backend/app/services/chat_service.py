"""
一次聊天发送的编排：凭据整理 -> Router -> Adapter（一次网络调用）-> Normalizer。

Router 失败时不会调用任何 Adapter；Adapter 的错误原样向上抛出，由路由层转换为 HTTP 错误。
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Mapping
from typing import Any

import httpx

from app.logging_config import logger
from app.provider.adapters import get_adapter
from app.provider.credentials import build_credential, format_error_message
from app.provider.errors import InvalidCredentialFormatError
from app.provider.message_format import has_image_content, latest_user_content
from app.provider.normalizer import NormalizedMessage, normalize_response
from app.provider.router import route
from app.provider.types import (
    Credential,
    ModelParameters,
    ProviderId,
    RoutingDecision,
    RoutingRequest,
)
from app.schemas.chat import (
    AssistantMessage,
    ChatChoice,
    ChatCompletionResponse,
    ChatRequest,
    RoutingInfo,
)
from app.settings import Settings


def collect_credentials(payload: ChatRequest) -> dict[ProviderId, Credential]:
    """
    合并 `credentials` 映射与旧版单个 `apiKey` 字段。

    - 映射中的 `verified` 来自 UI 侧的在线校验结果；
    - 旧版 `apiKey` 归属于请求的 provider，格式合法即视为已校验；
      若映射中已有该 provider 的凭据，以映射为准。
    """
    credentials: dict[ProviderId, Credential] = {}
    for provider, item in payload.credentials.items():
        credentials[provider] = build_credential(
            provider, item.api_key, live_valid=item.verified
        )

    if payload.api_key.strip() and payload.provider not in credentials:
        credentials[payload.provider] = build_credential(
            payload.provider, payload.api_key, live_valid=True
        )
    return credentials


def build_parameters(payload: ChatRequest) -> ModelParameters:
    defaults = ModelParameters()
    return ModelParameters(
        temperature=(
            payload.temperature if payload.temperature is not None else defaults.temperature
        ),
        max_tokens=payload.max_tokens if payload.max_tokens is not None else defaults.max_tokens,
        presence_penalty=(
            payload.presence_penalty
            if payload.presence_penalty is not None
            else defaults.presence_penalty
        ),
        frequency_penalty=(
            payload.frequency_penalty
            if payload.frequency_penalty is not None
            else defaults.frequency_penalty
        ),
        system_prompt=payload.system_prompt,
    )


def _ensure_requested_credential_format(
    credentials: Mapping[ProviderId, Credential], provider: ProviderId
) -> None:
    # 用户显式提供了格式错误的密钥：在任何网络调用之前直接报错，而不是静默回退
    credential = credentials.get(provider)
    if credential is not None and credential.present and not credential.format_valid:
        raise InvalidCredentialFormatError(format_error_message(provider), provider=provider)


def _api_key_for(
    decision: RoutingDecision, credentials: Mapping[ProviderId, Credential]
) -> str | None:
    if decision.use_server_credential:
        return None
    credential = credentials.get(decision.effective_provider)
    return credential.raw_value if credential is not None else None


def build_completion_response(
    raw: Any,
    normalized: NormalizedMessage,
    decision: RoutingDecision,
) -> ChatCompletionResponse:
    raw_map: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    model = normalized.model or decision.effective_model

    completion_id = raw_map.get("id")
    if not isinstance(completion_id, str) or not completion_id:
        completion_id = f"{decision.effective_provider.value}-{uuid.uuid4().hex}"
    created = raw_map.get("created")
    if not isinstance(created, int):
        created = int(time.time())

    finish_reason = "stop"
    choices = raw_map.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], Mapping):
        finish_reason = str(choices[0].get("finish_reason") or "stop")

    message = AssistantMessage(
        content=normalized.content,
        provider=normalized.provider,
        model=model,
    )
    usage = raw_map.get("usage")
    return ChatCompletionResponse(
        id=completion_id,
        created=created,
        model=model,
        provider=decision.effective_provider,
        choices=[ChatChoice(message=message, finish_reason=finish_reason)],
        message=message,
        routing=RoutingInfo(**decision.as_dict()),
        issue=normalized.issue.value if normalized.issue is not None else None,
        usage=dict(usage) if isinstance(usage, Mapping) else None,
    )


async def send_chat(
    payload: ChatRequest,
    *,
    client: httpx.AsyncClient,
    settings: Settings,
) -> ChatCompletionResponse:
    credentials = collect_credentials(payload)
    _ensure_requested_credential_format(credentials, payload.provider)

    messages = [message.to_payload() for message in payload.messages]
    decision = route(
        RoutingRequest(
            requested_model=payload.model,
            requested_provider=payload.provider,
            has_image=has_image_content(latest_user_content(messages)),
            credentials=credentials,
            openrouter_server_available=settings.has_openrouter_server_key,
        )
    )

    adapter = get_adapter(decision.effective_provider, client=client, settings=settings)
    raw = await adapter.send(
        _api_key_for(decision, credentials),
        decision.effective_model,
        messages,
        build_parameters(payload),
    )

    normalized = normalize_response(raw, decision.effective_provider, decision.effective_model)
    if normalized.issue is not None:
        logger.warning(
            "chat: replaced %s response from provider=%s model=%s with advisory",
            normalized.issue.value,
            decision.effective_provider.value,
            decision.effective_model,
        )
    return build_completion_response(raw, normalized, decision)


__all__ = [
    "build_completion_response",
    "build_parameters",
    "collect_credentials",
    "send_chat",
]
