"""
响应标准化：把各 Provider 的原始 JSON 统一成 {role, content, provider, model}。

纯函数，不做 I/O，也从不抛异常：所有异常情况都转换为一条可展示的提示文本，
保证会话线程中不会出现空的 assistant 回复。
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .degeneracy import is_degenerate
from .errors import MalformedResponseKind
from .types import ProviderId

NO_RESPONSE_ADVISORY = (
    "I couldn't generate a proper response. Please try again or adjust your settings."
)
UNEXPECTED_FORMAT_ADVISORY = (
    "The model returned a response in an unexpected format. Please try again or adjust "
    "your settings."
)
OPENROUTER_EMPTY_ADVISORY = (
    "The free OpenRouter model didn't return a usable response. This usually happens when "
    "the free tier is rate limited or the content was filtered. Try simplifying your prompt, "
    "waiting a moment before retrying, or switching to a different model."
)
_DIRECT_EMPTY_ADVISORY = (
    "{name} didn't return a usable response, possibly because the content was filtered. "
    "Try rephrasing or simplifying your prompt, or switching to a different model."
)


def empty_content_advisory(provider: ProviderId) -> str:
    if provider is ProviderId.OPENROUTER:
        return OPENROUTER_EMPTY_ADVISORY
    return _DIRECT_EMPTY_ADVISORY.format(name=provider.display_name)


@dataclass(frozen=True)
class NormalizedMessage:
    content: str
    provider: ProviderId
    model: str | None = None
    role: str = "assistant"
    # 被替换掉的异常类型；正常内容为 None
    issue: MalformedResponseKind | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
            "provider": self.provider.value,
            "model": self.model,
        }


def _first_message(raw: Any) -> Mapping[str, Any] | None:
    if not isinstance(raw, Mapping):
        return None
    choices = raw.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, Mapping):
        return None
    message = first.get("message")
    return message if isinstance(message, Mapping) else None


def normalize_response(
    raw: Any, provider: ProviderId, model: str | None = None
) -> NormalizedMessage:
    resolved_model = model
    if isinstance(raw, Mapping) and isinstance(raw.get("model"), str) and raw["model"]:
        resolved_model = raw["model"]

    def _advisory(text: str, kind: MalformedResponseKind) -> NormalizedMessage:
        return NormalizedMessage(
            content=text, provider=provider, model=resolved_model, issue=kind
        )

    message = _first_message(raw)
    if message is None:
        return _advisory(NO_RESPONSE_ADVISORY, MalformedResponseKind.NO_CHOICES)

    content = message.get("content")
    if content is None or (isinstance(content, str) and not content.strip()):
        return _advisory(empty_content_advisory(provider), MalformedResponseKind.EMPTY_CONTENT)

    if isinstance(content, str):
        if is_degenerate(content):
            return _advisory(
                empty_content_advisory(provider), MalformedResponseKind.DEGENERATE_CONTENT
            )
        return NormalizedMessage(content=content.strip(), provider=provider, model=resolved_model)

    try:
        serialized = json.dumps(content, ensure_ascii=False)
    except (TypeError, ValueError):
        return _advisory(UNEXPECTED_FORMAT_ADVISORY, MalformedResponseKind.UNEXPECTED_FORMAT)
    return NormalizedMessage(content=serialized, provider=provider, model=resolved_model)


__all__ = [
    "NO_RESPONSE_ADVISORY",
    "NormalizedMessage",
    "OPENROUTER_EMPTY_ADVISORY",
    "UNEXPECTED_FORMAT_ADVISORY",
    "empty_content_advisory",
    "normalize_response",
]
