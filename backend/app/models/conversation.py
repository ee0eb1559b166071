from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, relationship

from app.db.types import JSONBCompat, UTCDateTime

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, utcnow


class Conversation(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """一次聊天会话；除整体删除外只追加消息。"""

    __tablename__ = "conversations"

    title: Mapped[str] = Column(String(255), nullable=False)
    model: Mapped[str] = Column(String(128), nullable=False)
    timestamp = Column(UTCDateTime, default=utcnow, nullable=False, index=True)

    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.sequence",
    )


class Message(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """会话中的一条消息，写入后不再修改。"""

    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_conversation_sequence", "conversation_id", "sequence", unique=True),
    )

    conversation_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sequence: Mapped[int] = Column(
        Integer,
        nullable=False,
        doc="会话内的消息序号，从 1 开始递增",
    )
    role: Mapped[str] = Column(String(16), nullable=False)
    content = Column(JSONBCompat, nullable=False, doc="字符串、单个内容块或内容块列表")
    provider: Mapped[str | None] = Column(String(32), nullable=True)
    model: Mapped[str | None] = Column(String(128), nullable=True)
    timestamp = Column(UTCDateTime, default=utcnow, nullable=False)

    conversation = relationship("Conversation", back_populates="messages")


__all__ = ["Conversation", "Message"]
