"""
Provider 适配器基类

职责：
- 把中性请求（消息 + 模型 + 采样参数）转换为 Provider 的 chat-completions 调用
- 每次发送只发起一次网络请求，不做自动重试
- 把传输 / HTTP 错误归类为 AuthError / RateLimitedError / ModelNotFoundError /
  ProviderTimeoutError / UnknownProviderError

不负责：
- 选择 provider / 回退（由 Router 负责）
- 响应内容清洗（由 Normalizer 负责）
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

import httpx

from app.logging_config import logger, mask_secret
from app.settings import Settings

from ..credentials import check_format, format_error_message
from ..errors import (
    AuthError,
    InvalidCredentialFormatError,
    ModelNotFoundError,
    ProviderError,
    ProviderTimeoutError,
    RateLimitedError,
    UnknownProviderError,
)
from ..headers import base_url_for, build_headers
from ..message_format import with_system_prompt
from ..types import ModelParameters, ProviderId


def _extract_error_message(payload: Any, text: str) -> str:
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if payload.get("message"):
            return str(payload["message"])
    return text.strip()


class ProviderAdapter(ABC):
    """适配器基类，子类只需给出 wire 格式相关的差异。"""

    provider: ClassVar[ProviderId]

    def __init__(self, *, client: httpx.AsyncClient, settings: Settings) -> None:
        self.client = client
        self.settings = settings

    @property
    def name(self) -> str:
        return self.provider.display_name

    @property
    def chat_url(self) -> str:
        return f"{base_url_for(self.provider, settings=self.settings)}/chat/completions"

    def resolve_api_key(self, credential: str | None) -> str:
        """格式校验发生在任何网络请求之前。"""
        if not check_format(self.provider, credential):
            raise InvalidCredentialFormatError(
                format_error_message(self.provider), provider=self.provider
            )
        return credential.strip()

    def resolve_model(self, model: str) -> str:
        return model

    @abstractmethod
    def format_messages(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """把中性消息转换为 Provider 的 wire 格式"""

    def build_payload(
        self,
        model: str,
        messages: list[dict[str, Any]],
        parameters: ModelParameters,
    ) -> dict[str, Any]:
        return {
            "model": model,
            "messages": self.format_messages(
                with_system_prompt(messages, parameters.system_prompt)
            ),
            "temperature": parameters.temperature,
            "max_tokens": parameters.max_tokens,
            "presence_penalty": parameters.presence_penalty,
            "frequency_penalty": parameters.frequency_penalty,
        }

    async def send(
        self,
        credential: str | None,
        model: str,
        messages: list[dict[str, Any]],
        parameters: ModelParameters | None = None,
    ) -> dict[str, Any]:
        """
        发送一次 chat completion 请求

        Returns:
            dict: Provider 原始 JSON；响应体不是 JSON 时返回 {"raw": text}

        Raises:
            ProviderError: 归类后的错误，message 可直接展示
        """
        api_key = self.resolve_api_key(credential)
        resolved_model = self.resolve_model(model)
        payload = self.build_payload(resolved_model, messages, parameters or ModelParameters())

        logger.info(
            "adapter: sending request to provider=%s model=%s url=%s key=%s",
            self.provider.value,
            resolved_model,
            self.chat_url,
            mask_secret(api_key),
        )

        try:
            resp = await self.client.post(
                self.chat_url,
                headers=build_headers(self.provider, api_key, settings=self.settings),
                json=payload,
                timeout=self.settings.upstream_timeout,
            )
        except httpx.TimeoutException as exc:
            logger.warning("adapter: provider=%s timed out: %s", self.provider.value, exc)
            raise ProviderTimeoutError(
                f"{self.name} Error: Request timed out. The {self.name} API may be "
                "experiencing high traffic.",
                provider=self.provider,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("adapter: provider=%s request error: %s", self.provider.value, exc)
            raise UnknownProviderError(
                f"{self.name} Error: Failed to connect to the {self.name} API ({exc}).",
                provider=self.provider,
            ) from exc

        logger.info(
            "adapter: provider=%s model=%s status=%s body_length=%d",
            self.provider.value,
            resolved_model,
            resp.status_code,
            len(resp.text or ""),
        )

        try:
            data = resp.json()
        except ValueError:
            data = {"raw": resp.text}

        if resp.status_code >= 400:
            raise self.classify_error(resp.status_code, data, resp.text, model=resolved_model)
        return data

    def classify_error(
        self, status_code: int, payload: Any, text: str, *, model: str
    ) -> ProviderError:
        upstream_message = _extract_error_message(payload, text)
        lowered = upstream_message.lower()
        name = self.name

        if status_code == 401 or "invalid_api_key" in lowered or "invalid api key" in lowered:
            return AuthError(f"{name} Error: Invalid or expired API key.", provider=self.provider)
        if "insufficient_quota" in lowered or "insufficient balance" in lowered or status_code == 402:
            return RateLimitedError(
                f"{name} Error: Insufficient account balance. Please add funds to your "
                f"{name} account.",
                provider=self.provider,
            )
        if status_code == 429 or "rate_limit" in lowered or "rate limit" in lowered:
            return RateLimitedError(
                f"{name} Error: Rate limit exceeded. Please try again later.",
                provider=self.provider,
            )
        if status_code == 404 or "model_not_found" in lowered or "model not exist" in lowered:
            return ModelNotFoundError(self.model_not_found_message(model), provider=self.provider)

        logger.warning(
            "adapter: provider=%s unexpected status=%s body=%s",
            self.provider.value,
            status_code,
            text[:500],
        )
        return UnknownProviderError(
            f"{name} Error: {upstream_message or f'HTTP {status_code}'}",
            provider=self.provider,
        )

    def model_not_found_message(self, model: str) -> str:
        return (
            f'{self.name} Error: The model "{model}" was not found or is not available '
            "with your account."
        )


__all__ = ["ProviderAdapter"]
