"""
Provider 相关错误分类。

每个错误带有稳定的 `code` 与对应的 HTTP 状态码，message 可直接展示给用户。
路由层统一通过 app.errors.http_error 转换为 HTTPException。
"""

from __future__ import annotations

import enum

from .types import ProviderId


class ProviderError(Exception):
    """Provider 错误基类"""

    code = "unknown"
    status_code = 502

    def __init__(self, message: str, *, provider: ProviderId | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider


class InvalidCredentialFormatError(ProviderError):
    """凭据格式不合法，发生在任何网络调用之前"""

    code = "invalid_credential_format"
    status_code = 400


class AuthError(ProviderError):
    """凭据被 Provider 拒绝（401 / invalid key）"""

    code = "credential_rejected"
    status_code = 401


class NoProviderAvailableError(ProviderError):
    """没有任何可用凭据"""

    code = "no_provider_available"
    status_code = 400


class ProviderUnavailableError(ProviderError):
    """某个必需的 Provider（如图片分析所需的 OpenAI）缺少可用凭据"""

    code = "provider_unavailable"
    status_code = 400


class RateLimitedError(ProviderError):
    code = "rate_limited"
    status_code = 429


class ModelNotFoundError(ProviderError):
    code = "model_not_found"
    status_code = 404


class ProviderTimeoutError(ProviderError):
    code = "timeout"
    status_code = 504


class UnknownProviderError(ProviderError):
    code = "unknown"
    status_code = 502


class MalformedResponseKind(enum.StrEnum):
    """
    Normalizer 替换掉的异常响应类型（不会以异常形式抛出）。
    """

    NO_CHOICES = "no_choices"
    EMPTY_CONTENT = "empty_content"
    DEGENERATE_CONTENT = "degenerate_content"
    UNEXPECTED_FORMAT = "unexpected_format"


__all__ = [
    "AuthError",
    "InvalidCredentialFormatError",
    "MalformedResponseKind",
    "ModelNotFoundError",
    "NoProviderAvailableError",
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
    "RateLimitedError",
    "UnknownProviderError",
]
