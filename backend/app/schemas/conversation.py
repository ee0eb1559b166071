from __future__ import annotations

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.provider.types import ProviderId

from .chat import MessageContent


class ConversationCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = Field(default=None, max_length=255)
    model: str = Field(..., min_length=1, max_length=128)
    # 未提供 title 时由首条用户消息推导
    first_prompt: str | None = Field(default=None, alias="firstPrompt")


class MessageCreateRequest(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: MessageContent
    provider: ProviderId | None = None
    model: str | None = Field(default=None, max_length=128)


class MessageResponse(BaseModel):
    id: UUID
    role: str
    # 落库的原始 JSON
    content: str | dict[str, Any] | list[Any]
    provider: ProviderId | None = None
    model: str | None = None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationResponse(BaseModel):
    id: UUID
    title: str
    model: str
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationDetailResponse(ConversationResponse):
    messages: list[MessageResponse] = Field(default_factory=list)


__all__ = [
    "ConversationCreateRequest",
    "ConversationDetailResponse",
    "ConversationResponse",
    "MessageCreateRequest",
    "MessageResponse",
]
