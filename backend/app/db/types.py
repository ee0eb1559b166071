from __future__ import annotations

import datetime as dt

from sqlalchemy import JSON, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeDecorator


class JSONBCompat(TypeDecorator):
    """消息内容（字符串 / 内容块 / 内容块列表）：PostgreSQL 用 JSONB，其它方言用 JSON。"""

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())


class UTCDateTime(TypeDecorator):
    """
    时间戳统一按 UTC 读写：
    - PostgreSQL：timestamptz，写入前转为 UTC；
    - SQLite：落库为 naive UTC，读出时补齐 tzinfo。
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None or not isinstance(value, dt.datetime):
            return value
        if value.tzinfo is None:
            return value
        as_utc = value.astimezone(dt.UTC)
        return as_utc if dialect.name == "postgresql" else as_utc.replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None or not isinstance(value, dt.datetime):
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=dt.UTC)
        return value.astimezone(dt.UTC)


__all__ = ["JSONBCompat", "UTCDateTime"]
