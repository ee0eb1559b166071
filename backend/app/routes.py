from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.chat_routes import router as chat_router
from app.api.conversation_routes import router as conversation_router
from app.db.session import SessionLocal
from app.logging_config import logger, setup_logging
from app.models import Base
from app.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)
    # 开发环境下直接建表；生产环境以 alembic 迁移为准
    if settings.environment != "production":
        with SessionLocal() as session:
            Base.metadata.create_all(bind=session.get_bind())
    logger.info(
        "polychat started: environment=%s openrouter_server_key=%s",
        settings.environment,
        settings.has_openrouter_server_key,
    )
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Polychat", version="0.1.0", lifespan=lifespan)

    app.include_router(chat_router, prefix=settings.api_prefix)
    app.include_router(conversation_router, prefix=settings.api_prefix)

    @app.get("/health", tags=["system"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


__all__ = ["create_app", "lifespan"]
