"""
HTTP 错误构造工具：统一 detail 结构为 {"error": ..., "message": ..., **details}。
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

from app.provider.errors import ProviderError


def http_error(
    status_code: int,
    *,
    error: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> HTTPException:
    detail: dict[str, Any] = {"error": error, "message": message}
    if details:
        detail.update(details)
    return HTTPException(status_code=status_code, detail=detail)


def bad_request(message: str, *, details: dict[str, Any] | None = None) -> HTTPException:
    return http_error(
        status.HTTP_400_BAD_REQUEST, error="bad_request", message=message, details=details
    )


def not_found(message: str, *, details: dict[str, Any] | None = None) -> HTTPException:
    return http_error(
        status.HTTP_404_NOT_FOUND, error="not_found", message=message, details=details
    )


def conflict(message: str, *, details: dict[str, Any] | None = None) -> HTTPException:
    return http_error(
        status.HTTP_409_CONFLICT, error="conflict", message=message, details=details
    )


def service_unavailable(
    message: str, *, details: dict[str, Any] | None = None
) -> HTTPException:
    return http_error(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        error="service_unavailable",
        message=message,
        details=details,
    )


def provider_error(exc: ProviderError) -> HTTPException:
    details = {"provider": exc.provider.value} if exc.provider is not None else None
    return http_error(exc.status_code, error=exc.code, message=exc.message, details=details)


__all__ = [
    "bad_request",
    "conflict",
    "http_error",
    "not_found",
    "provider_error",
    "service_unavailable",
]
