from __future__ import annotations

from uuid import UUID

from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.models import Conversation, Message


def list_conversations(db: Session) -> list[Conversation]:
    stmt: Select[tuple[Conversation]] = select(Conversation).order_by(
        Conversation.timestamp.desc(),
        Conversation.created_at.desc(),
    )
    return list(db.execute(stmt).scalars().all())


def get_conversation(
    db: Session, *, conversation_id: UUID, with_messages: bool = False
) -> Conversation | None:
    stmt: Select[tuple[Conversation]] = select(Conversation).where(
        Conversation.id == conversation_id
    )
    if with_messages:
        stmt = stmt.options(selectinload(Conversation.messages))
    return db.execute(stmt).scalars().first()


def next_message_sequence(db: Session, *, conversation_id: UUID) -> int:
    stmt = select(func.max(Message.sequence)).where(Message.conversation_id == conversation_id)
    current = db.execute(stmt).scalar()
    return int(current or 0) + 1


def create_conversation(db: Session, *, conversation: Conversation) -> Conversation:
    db.add(conversation)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    db.refresh(conversation)
    return conversation


def add_message(db: Session, *, message: Message) -> Message:
    db.add(message)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    db.refresh(message)
    return message


def delete_conversation(db: Session, *, conversation: Conversation) -> None:
    db.delete(conversation)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def delete_all_conversations(db: Session) -> int:
    # SQLite 默认不启用外键级联，先显式删除消息
    db.execute(delete(Message))
    result = db.execute(delete(Conversation))
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    return int(result.rowcount or 0)


__all__ = [
    "add_message",
    "create_conversation",
    "delete_all_conversations",
    "delete_conversation",
    "get_conversation",
    "list_conversations",
    "next_message_sequence",
]
