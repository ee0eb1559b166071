"""
OpenRouter 适配器

- 每次调用都带 HTTP-Referer / X-Title / OpenRouter-Data-Policy 头（见 provider.headers）；
- 用户提供密钥时使用用户密钥，否则回退到进程级共享密钥（免费档）；
- 额外的采样参数用于抑制免费模型的重复输出。
"""

from __future__ import annotations

from typing import Any

from ..credentials import check_format, format_error_message
from ..errors import InvalidCredentialFormatError, NoProviderAvailableError
from ..message_format import to_text_messages
from ..types import ModelParameters, ProviderId
from .base import ProviderAdapter

OPENROUTER_EXTRA_PARAMS: dict[str, Any] = {
    "top_p": 0.9,
    "top_k": 40,
    "seed": 42,
    "stop": ["\n\n\n"],
    "stream": False,
    "response_format": {"type": "text"},
}


class OpenRouterAdapter(ProviderAdapter):
    provider = ProviderId.OPENROUTER

    def resolve_api_key(self, credential: str | None) -> str:
        if credential and credential.strip():
            if not check_format(self.provider, credential):
                raise InvalidCredentialFormatError(
                    format_error_message(self.provider), provider=self.provider
                )
            return credential.strip()

        if self.settings.has_openrouter_server_key:
            return self.settings.openrouter_api_key.strip()

        raise NoProviderAvailableError(
            "OpenRouter Error: No valid API key available. Please provide an OpenRouter API key.",
            provider=self.provider,
        )

    def format_messages(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return to_text_messages(messages)

    def build_payload(
        self,
        model: str,
        messages: list[dict[str, Any]],
        parameters: ModelParameters,
    ) -> dict[str, Any]:
        payload = super().build_payload(model, messages, parameters)
        payload.update(OPENROUTER_EXTRA_PARAMS)
        return payload

    def model_not_found_message(self, model: str) -> str:
        return "OpenRouter Error: Model not found. Please select a different model in settings."


__all__ = ["OPENROUTER_EXTRA_PARAMS", "OpenRouterAdapter"]
