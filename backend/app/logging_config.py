"""
Shared logging setup.

Every module logs through ``app.logging_config.logger`` so that handlers and
levels are configured in exactly one place.
"""

from __future__ import annotations

import logging
import sys

from app.settings import settings

LOGGER_NAME = "polychat"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """
    初始化 polychat logger（幂等）。

    - 只挂一个 stdout handler，重复调用不会叠加 handler；
    - level 为空时使用 settings.log_level。
    """
    target = logging.getLogger(LOGGER_NAME)
    resolved = level if level is not None else settings.log_level
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO
    target.setLevel(resolved)

    if not any(getattr(h, "_polychat_handler", False) for h in target.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._polychat_handler = True  # type: ignore[attr-defined]
        target.addHandler(handler)

    target.propagate = False
    return target


def mask_secret(value: str | None, prefix: int = 5, suffix: int = 4) -> str:
    """日志里只保留密钥前后几位。"""
    if not value:
        return ""
    if len(value) <= prefix + suffix:
        return value[0] + "*" * (len(value) - 1)
    return f"{value[:prefix]}...{value[-suffix:]}"


logger = setup_logging()

__all__ = ["LOGGER_NAME", "logger", "mask_secret", "setup_logging"]
