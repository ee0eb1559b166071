from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, Uuid
from sqlalchemy.orm import declarative_base

from app.db.types import UTCDateTime

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(UTC)


class UUIDPrimaryKeyMixin:
    """UUID primary key, generated client-side."""

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )


class TimestampMixin:
    """
    创建/更新时间。

    使用应用侧 UTC 时间而非 server_default：SQLite 的 CURRENT_TIMESTAMP 只有秒级精度，
    会导致同一秒内创建的会话排序不稳定。
    """

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)


__all__ = ["Base", "TimestampMixin", "UUIDPrimaryKeyMixin", "utcnow"]
