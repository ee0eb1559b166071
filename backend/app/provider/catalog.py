"""
已知模型清单与 OpenRouter 模型归一化。
"""

from __future__ import annotations

from .types import ProviderId

OPENAI_MODELS: tuple[str, ...] = ("gpt-3.5-turbo", "gpt-4o", "gpt-4-turbo", "gpt-4")
DEEPSEEK_MODELS: tuple[str, ...] = ("deepseek-chat", "deepseek-coder", "deepseek-llm-67b-chat")

OPENAI_VISION_MODEL = "gpt-4o"

# 经过验证的 OpenRouter 模型；第一个为默认（免费档）模型
OPENROUTER_MODELS: tuple[str, ...] = (
    "deepseek/deepseek-v3-base:free",
    "deepseek/deepseek-chat-v3-0324:free",
    "deepseek/deepseek-r1:free",
)
OPENROUTER_DEFAULT_MODEL = OPENROUTER_MODELS[0]
OPENROUTER_DEFAULT_VENDOR = "deepseek"

DEFAULT_MODELS: dict[ProviderId, str] = {
    ProviderId.OPENAI: "gpt-3.5-turbo",
    ProviderId.DEEPSEEK: "deepseek-chat",
    ProviderId.OPENROUTER: OPENROUTER_DEFAULT_MODEL,
}


def is_openai_model(model: str) -> bool:
    return model in OPENAI_MODELS


def is_deepseek_model(model: str) -> bool:
    return model in DEEPSEEK_MODELS


def _base_name(model: str) -> str:
    """'deepseek/deepseek-v3-base:free' -> 'deepseek-v3-base'"""
    name = model.rsplit("/", 1)[-1]
    return name.split(":", 1)[0]


def normalize_openrouter_model(model: str | None) -> str:
    """
    把任意模型字符串映射到 OpenRouter 允许清单中的条目。

    1. 已在清单中：原样返回；
    2. 去掉 vendor 前缀与 `:xxx` 后缀后与清单条目同名：返回该条目
       （例如裸的 `deepseek-v3-base` 或 `deepseek/deepseek-v3-base`）；
    3. 裸的 `deepseek-*` 名称（如 `deepseek-v3`、`deepseek-v3-base-0301`）：按前缀匹配
       最接近的条目，相当于补上 vendor 前缀和 `:free` 后缀；
    4. 其它情况：回退到默认模型。
    """
    candidate = (model or "").strip()
    if not candidate:
        return OPENROUTER_DEFAULT_MODEL
    if candidate in OPENROUTER_MODELS:
        return candidate

    base = _base_name(candidate).lower()
    for known in OPENROUTER_MODELS:
        if _base_name(known) == base:
            return known

    if "/" not in candidate and base.startswith(f"{OPENROUTER_DEFAULT_VENDOR}-"):
        for known in OPENROUTER_MODELS:
            known_base = _base_name(known)
            if known_base.startswith(base) or base.startswith(known_base):
                return known

    return OPENROUTER_DEFAULT_MODEL


__all__ = [
    "DEEPSEEK_MODELS",
    "DEFAULT_MODELS",
    "OPENAI_MODELS",
    "OPENAI_VISION_MODEL",
    "OPENROUTER_DEFAULT_MODEL",
    "OPENROUTER_MODELS",
    "is_deepseek_model",
    "is_openai_model",
    "normalize_openrouter_model",
]
