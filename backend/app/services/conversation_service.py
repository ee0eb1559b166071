from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.logging_config import logger
from app.models import Conversation, Message
from app.models.base import utcnow
from app.repositories.conversation_repository import (
    add_message as repo_add_message,
    create_conversation as repo_create_conversation,
    delete_all_conversations as repo_delete_all_conversations,
    delete_conversation as repo_delete_conversation,
    get_conversation as repo_get_conversation,
    list_conversations as repo_list_conversations,
    next_message_sequence as repo_next_message_sequence,
)
from app.schemas.conversation import ConversationCreateRequest, MessageCreateRequest

DEFAULT_CONVERSATION_TITLE = "New conversation"
TITLE_MAX_WORDS = 5


class ConversationServiceError(RuntimeError):
    """Base error for conversation store operations."""


class ConversationNotFoundError(ConversationServiceError):
    """Raised when the conversation id cannot be found."""


def derive_conversation_title(first_prompt: str | None) -> str:
    """取首条用户消息的前 5 个词作为标题；被截断时追加 `...`。"""
    words = (first_prompt or "").split()
    if not words:
        return DEFAULT_CONVERSATION_TITLE
    title = " ".join(words[:TITLE_MAX_WORDS])
    if len(words) > TITLE_MAX_WORDS:
        title += "..."
    return title[:255]


def _content_payload(payload: MessageCreateRequest) -> Any:
    content = payload.content
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return [
            part if isinstance(part, str) else part.model_dump(mode="json", exclude_none=True)
            for part in content
        ]
    return content.model_dump(mode="json", exclude_none=True)


def list_conversations(session: Session) -> list[Conversation]:
    return repo_list_conversations(session)


def get_conversation(session: Session, conversation_id: UUID) -> Conversation:
    conversation = repo_get_conversation(
        session, conversation_id=conversation_id, with_messages=True
    )
    if conversation is None:
        raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
    return conversation


def create_conversation(session: Session, payload: ConversationCreateRequest) -> Conversation:
    title = (payload.title or "").strip() or derive_conversation_title(payload.first_prompt)
    conversation = Conversation(title=title, model=payload.model, timestamp=utcnow())
    conversation = repo_create_conversation(session, conversation=conversation)
    logger.info("conversation: created id=%s model=%s", conversation.id, conversation.model)
    return conversation


def append_message(
    session: Session, conversation_id: UUID, payload: MessageCreateRequest
) -> Message:
    conversation = repo_get_conversation(session, conversation_id=conversation_id)
    if conversation is None:
        raise ConversationNotFoundError(f"Conversation {conversation_id} not found")

    content = _content_payload(payload)

    message = Message(
        conversation_id=conversation.id,
        sequence=repo_next_message_sequence(session, conversation_id=conversation.id),
        role=payload.role,
        content=content,
        provider=payload.provider.value if payload.provider is not None else None,
        model=payload.model,
        timestamp=utcnow(),
    )
    try:
        message = repo_add_message(session, message=message)
    except IntegrityError as exc:
        logger.error("Failed to append message to conversation %s: %s", conversation_id, exc)
        raise ConversationServiceError("消息序号冲突，请重试") from exc

    logger.debug(
        "conversation: appended message id=%s conversation=%s role=%s sequence=%d",
        message.id,
        conversation_id,
        message.role,
        message.sequence,
    )
    return message


def delete_conversation(session: Session, conversation_id: UUID) -> None:
    conversation = repo_get_conversation(session, conversation_id=conversation_id)
    if conversation is None:
        return
    repo_delete_conversation(session, conversation=conversation)
    logger.info("conversation: deleted id=%s", conversation_id)


def delete_all_conversations(session: Session) -> int:
    removed = repo_delete_all_conversations(session)
    logger.info("conversation: deleted all (%d)", removed)
    return removed


__all__ = [
    "DEFAULT_CONVERSATION_TITLE",
    "ConversationNotFoundError",
    "ConversationServiceError",
    "append_message",
    "create_conversation",
    "delete_all_conversations",
    "delete_conversation",
    "derive_conversation_title",
    "get_conversation",
    "list_conversations",
]
