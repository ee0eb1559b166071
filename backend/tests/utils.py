from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
from fastapi import FastAPI
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.deps import get_db
from app.models import Base
from app.settings import Settings

OPENAI_KEY = "sk-" + "a" * 48
DEEPSEEK_KEY = "sk-" + "d" * 32
OPENROUTER_KEY = "sk-or-v1-user-key"
OPENROUTER_SERVER_KEY = "sk-or-v1-server-key"


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "environment": "test",
        "database_url": "sqlite+pysqlite:///:memory:",
        "openrouter_api_key": "",
        "openai_base_url": "https://openai.test/v1",
        "deepseek_base_url": "https://deepseek.test/v1",
        "openrouter_base_url": "https://openrouter.test/api/v1",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def install_inmemory_db(app: FastAPI) -> sessionmaker[Session]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return SessionLocal


def completion_payload(
    content: Any,
    *,
    model: str = "gpt-3.5-turbo",
    completion_id: str = "chatcmpl-test",
) -> dict[str, Any]:
    return {
        "id": completion_id,
        "object": "chat.completion",
        "created": 1_700_000_000,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 5, "completion_tokens": 7, "total_tokens": 12},
    }


Responder = Callable[[httpx.Request], httpx.Response]


@dataclass
class FakeUpstream:
    """
    httpx.MockTransport 的简单封装：按 (method, url) 返回预设响应，并记录所有请求。

    未注册的请求返回 599，便于在测试中发现意外的网络调用。
    """

    routes: dict[tuple[str, str], Responder] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def add(
        self,
        method: str,
        url: str,
        *,
        status_code: int = 200,
        json_body: Any = None,
        text: str | None = None,
    ) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status_code, text=text)
            return httpx.Response(status_code, json=json_body)

        self.routes[(method.upper(), url)] = responder

    def add_responder(self, method: str, url: str, responder: Responder) -> None:
        self.routes[(method.upper(), url)] = responder

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, str(request.url))
        responder = self.routes.get(key)
        if responder is None:
            return httpx.Response(599, json={"error": f"unexpected call {key}"})
        return responder(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def last_json(self) -> dict[str, Any]:
        assert self.requests, "no upstream request was recorded"
        return json.loads(self.requests[-1].content)


__all__ = [
    "DEEPSEEK_KEY",
    "FakeUpstream",
    "OPENAI_KEY",
    "OPENROUTER_KEY",
    "OPENROUTER_SERVER_KEY",
    "completion_payload",
    "install_inmemory_db",
    "make_settings",
]
