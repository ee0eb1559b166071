from __future__ import annotations

from app.settings import Settings

from .types import ProviderId


def build_headers(provider: ProviderId, api_key: str, *, settings: Settings) -> dict[str, str]:
    """
    构造上游请求头。

    OpenRouter 每次调用都必须带上 HTTP-Referer / X-Title 以及数据策略头。
    """
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }
    if provider is ProviderId.OPENROUTER:
        headers["HTTP-Referer"] = settings.openrouter_referer
        headers["X-Title"] = settings.openrouter_title
        headers["OpenRouter-Data-Policy"] = settings.openrouter_data_policy
    return headers


def base_url_for(provider: ProviderId, *, settings: Settings) -> str:
    if provider is ProviderId.OPENAI:
        return settings.openai_base_url.rstrip("/")
    if provider is ProviderId.DEEPSEEK:
        return settings.deepseek_base_url.rstrip("/")
    return settings.openrouter_base_url.rstrip("/")


__all__ = ["base_url_for", "build_headers"]
