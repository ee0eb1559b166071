from __future__ import annotations

from typing import Any

from ..catalog import OPENAI_VISION_MODEL
from ..message_format import to_openai_messages
from ..types import ProviderId
from .base import ProviderAdapter

# 旧的 gpt-4 统一映射到 gpt-4o
LEGACY_MODEL_ALIASES = {"gpt-4": OPENAI_VISION_MODEL}


class OpenAIAdapter(ProviderAdapter):
    """OpenAI：唯一支持图片内容块的 Provider"""

    provider = ProviderId.OPENAI

    def resolve_model(self, model: str) -> str:
        return LEGACY_MODEL_ALIASES.get(model, model)

    def format_messages(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return to_openai_messages(messages)


__all__ = ["OpenAIAdapter"]
