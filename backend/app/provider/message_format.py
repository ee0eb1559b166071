"""
把中性消息结构（role + 字符串 / 内容块）映射为各 Provider 的 wire 格式。
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

from app.logging_config import logger

ALLOWED_ROLES = {"user", "assistant", "system"}


def _role(value: Any) -> str:
    role = str(value or "").lower()
    return role if role in ALLOWED_ROLES else "user"


def _stringify(content: Any) -> str:
    if isinstance(content, str):
        return content
    try:
        return json.dumps(content, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(content)


def _image_url(block: Mapping[str, Any]) -> str | None:
    image = block.get("image_url")
    if isinstance(image, Mapping):
        url = image.get("url")
        return url if isinstance(url, str) and url else None
    return None


def has_image_content(content: Any) -> bool:
    blocks: Iterable[Any]
    if isinstance(content, Mapping):
        blocks = [content]
    elif isinstance(content, list):
        blocks = content
    else:
        return False
    return any(
        isinstance(block, Mapping)
        and block.get("type") == "image_url"
        and _image_url(block) is not None
        for block in blocks
    )


def latest_user_content(messages: list[dict[str, Any]]) -> Any:
    for message in reversed(messages):
        if message.get("role") == "user":
            return message.get("content")
    return None


def with_system_prompt(
    messages: list[dict[str, Any]], system_prompt: str | None
) -> list[dict[str, Any]]:
    """会话首条不是 system 消息时，在最前面补上 system prompt。"""
    if not system_prompt:
        return list(messages)
    if messages and messages[0].get("role") == "system":
        return list(messages)
    return [{"role": "system", "content": system_prompt}, *messages]


def _openai_part(part: Any) -> dict[str, Any] | None:
    if isinstance(part, str):
        return {"type": "text", "text": part}
    if not isinstance(part, Mapping):
        return None
    if part.get("type") == "text" and part.get("text"):
        return {"type": "text", "text": part["text"]}
    if part.get("type") == "image_url":
        url = _image_url(part)
        if url:
            return {"type": "image_url", "image_url": {"url": url}}
    return None


def to_openai_messages(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    OpenAI 支持多模态：
    - 字符串：原样；
    - 内容块列表：逐项转换，丢弃无法识别的块；
    - 单个内容块：包成单元素列表；
    - 其它形状：字符串化。
    """
    formatted: list[dict[str, Any]] = []
    for message in messages:
        role = _role(message.get("role"))
        content = message.get("content")

        if isinstance(content, str):
            formatted.append({"role": role, "content": content})
        elif isinstance(content, list):
            parts = [p for p in (_openai_part(item) for item in content) if p is not None]
            formatted.append({"role": role, "content": parts})
        elif isinstance(content, Mapping) and (part := _openai_part(content)) is not None:
            formatted.append({"role": role, "content": [part]})
        else:
            formatted.append({"role": role, "content": _stringify(content)})
    return formatted


def _flatten_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    blocks = [content] if isinstance(content, Mapping) else content
    if not isinstance(blocks, list):
        return _stringify(content)

    texts: list[str] = []
    for block in blocks:
        if isinstance(block, str):
            texts.append(block)
        elif isinstance(block, Mapping) and block.get("type") == "text":
            texts.append(str(block.get("text") or ""))
        elif isinstance(block, Mapping) and block.get("type") == "image_url":
            logger.debug("message_format: dropping image block for text-only provider")
        else:
            texts.append(_stringify(block))
    return "\n".join(t for t in texts if t)


def to_text_messages(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """纯文本 Provider（DeepSeek / OpenRouter）：内容块压平成文本，图片块丢弃。"""
    return [
        {"role": _role(message.get("role")), "content": _flatten_text(message.get("content"))}
        for message in messages
    ]


__all__ = [
    "has_image_content",
    "latest_user_content",
    "to_openai_messages",
    "to_text_messages",
    "with_system_prompt",
]
