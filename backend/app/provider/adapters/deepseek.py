from __future__ import annotations

from typing import Any

from ..message_format import to_text_messages
from ..types import ProviderId
from .base import ProviderAdapter


class DeepSeekAdapter(ProviderAdapter):
    provider = ProviderId.DEEPSEEK

    def format_messages(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return to_text_messages(messages)


__all__ = ["DeepSeekAdapter"]
