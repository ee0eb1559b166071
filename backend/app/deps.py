from collections.abc import AsyncIterator, Iterator

import httpx
from sqlalchemy.orm import Session

from .db import get_db_session
from .settings import Settings, get_settings


def get_app_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings; tests override it."""
    return get_settings()


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """
    Provide an httpx client for provider calls.

    超时由各调用点单独指定（在线校验 / chat completion 不同），这里不设全局超时。
    支持通过环境变量 HTTP_PROXY/HTTPS_PROXY 配置代理。
    """
    async with httpx.AsyncClient(timeout=None, trust_env=True) as client:
        yield client


def get_db() -> Iterator[Session]:
    """
    Provide a synchronous SQLAlchemy session.
    """
    yield from get_db_session()


__all__ = ["get_app_settings", "get_db", "get_http_client"]
