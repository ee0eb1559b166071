from __future__ import annotations

import httpx

from app.settings import Settings

from ..types import ProviderId
from .base import ProviderAdapter
from .deepseek import DeepSeekAdapter
from .openai import OpenAIAdapter
from .openrouter import OpenRouterAdapter

_ADAPTERS: dict[ProviderId, type[ProviderAdapter]] = {
    ProviderId.OPENAI: OpenAIAdapter,
    ProviderId.DEEPSEEK: DeepSeekAdapter,
    ProviderId.OPENROUTER: OpenRouterAdapter,
}


def get_adapter(
    provider: ProviderId, *, client: httpx.AsyncClient, settings: Settings
) -> ProviderAdapter:
    return _ADAPTERS[provider](client=client, settings=settings)


__all__ = [
    "DeepSeekAdapter",
    "OpenAIAdapter",
    "OpenRouterAdapter",
    "ProviderAdapter",
    "get_adapter",
]
