"""
凭据校验：同步格式校验 + 异步在线校验（list-models）。

在线校验永远不抛异常，只返回 bool；格式不合法时不会发起任何网络请求。
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from app.logging_config import logger, mask_secret
from app.settings import Settings

from .catalog import DEFAULT_MODELS
from .headers import base_url_for, build_headers
from .types import Credential, ProviderId

OPENAI_KEY_PREFIX = "sk-"
OPENAI_KEY_MIN_LENGTH = 51
DEEPSEEK_KEY_PREFIX = "sk-"
DEEPSEEK_KEY_MIN_LENGTH = 32
OPENROUTER_KEY_PREFIX = "sk-or-"


def check_format(provider: ProviderId, api_key: str | None) -> bool:
    if not api_key or not api_key.strip():
        return False
    if provider is ProviderId.OPENAI:
        return api_key.startswith(OPENAI_KEY_PREFIX) and len(api_key) >= OPENAI_KEY_MIN_LENGTH
    if provider is ProviderId.DEEPSEEK:
        return (
            api_key.startswith(DEEPSEEK_KEY_PREFIX) and len(api_key) >= DEEPSEEK_KEY_MIN_LENGTH
        )
    return api_key.startswith(OPENROUTER_KEY_PREFIX)


def format_error_message(provider: ProviderId) -> str:
    if provider is ProviderId.OPENAI:
        return (
            "OpenAI Error: Invalid API key format. OpenAI keys should start with 'sk-' "
            "and be at least 51 characters long."
        )
    if provider is ProviderId.DEEPSEEK:
        return (
            "DeepSeek Error: Invalid API key format. DeepSeek keys should start with 'sk-' "
            "and be at least 32 characters long."
        )
    return "OpenRouter Error: Invalid API key format. OpenRouter keys should start with 'sk-or-'."


async def _probe_models_endpoint(
    provider: ProviderId,
    api_key: str,
    *,
    client: httpx.AsyncClient,
    settings: Settings,
) -> bool:
    url = f"{base_url_for(provider, settings=settings)}/models"
    try:
        resp = await client.get(
            url,
            headers=build_headers(provider, api_key, settings=settings),
            timeout=settings.credential_verify_timeout,
        )
    except httpx.HTTPError as exc:
        logger.warning(
            "credentials: %s verification request failed key=%s: %s",
            provider.value,
            mask_secret(api_key),
            exc,
        )
        return False

    logger.info(
        "credentials: %s verification status=%s key=%s",
        provider.value,
        resp.status_code,
        mask_secret(api_key),
    )
    return resp.status_code == 200


async def verify_credential(
    provider: ProviderId,
    api_key: str | None,
    *,
    client: httpx.AsyncClient,
    settings: Settings,
) -> bool:
    """格式校验通过后再调用 Provider 的 /models 端点在线校验。"""
    if not check_format(provider, api_key):
        return False
    return await _probe_models_endpoint(provider, api_key, client=client, settings=settings)


async def verify_openrouter_connection(
    *, client: httpx.AsyncClient, settings: Settings
) -> bool:
    """校验进程级 OpenRouter 共享密钥是否可用；未配置时不发请求。"""
    if not settings.has_openrouter_server_key:
        logger.info("credentials: no server-side OpenRouter key configured")
        return False
    return await _probe_models_endpoint(
        ProviderId.OPENROUTER,
        settings.openrouter_api_key.strip(),
        client=client,
        settings=settings,
    )


def build_credential(
    provider: ProviderId, api_key: str | None, *, live_valid: bool = False
) -> Credential:
    """由原始值构造 Credential；空值或格式不合法时 live_valid 一律视为 False。"""
    raw = (api_key or "").strip()
    format_valid = check_format(provider, raw)
    return Credential(
        provider=provider,
        raw_value=raw,
        format_valid=format_valid,
        live_valid=bool(live_valid and raw and format_valid),
    )


@dataclass(frozen=True)
class PreferenceUpdate:
    """校验成功后建议 UI 切换到的 provider + 默认模型。"""

    provider: ProviderId
    model: str


@dataclass(frozen=True)
class ValidationOutcome:
    credential: Credential
    preference: PreferenceUpdate | None = None

    @property
    def valid(self) -> bool:
        return self.credential.valid


async def validate_credential(
    provider: ProviderId,
    api_key: str | None,
    *,
    client: httpx.AsyncClient,
    settings: Settings,
    current_provider: ProviderId | None = None,
) -> ValidationOutcome:
    """
    完整校验流程：格式 -> 在线 -> 偏好更新事件。

    偏好更新以返回值的形式交给调用方（唯一持有设置状态的一方），
    只有在当前 provider 与被校验的 provider 不同时才会给出。
    """
    live_valid = await verify_credential(provider, api_key, client=client, settings=settings)
    credential = build_credential(provider, api_key, live_valid=live_valid)

    preference: PreferenceUpdate | None = None
    if credential.valid and current_provider is not provider:
        preference = PreferenceUpdate(provider=provider, model=DEFAULT_MODELS[provider])
    return ValidationOutcome(credential=credential, preference=preference)


__all__ = [
    "PreferenceUpdate",
    "ValidationOutcome",
    "build_credential",
    "check_format",
    "format_error_message",
    "validate_credential",
    "verify_credential",
    "verify_openrouter_connection",
]
