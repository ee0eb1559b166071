from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from .conversation import Conversation, Message

__all__ = [
    "Base",
    "Conversation",
    "Message",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
]
