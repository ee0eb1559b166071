"""
集中配置：从环境变量加载（前缀 POLYCHAT_），OpenRouter 共享密钥沿用 OPENROUTER_API_KEY。
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Polychat backend settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="POLYCHAT_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = "development"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    # --- Database ---
    database_url: str = "sqlite+pysqlite:///./polychat.db"

    # --- Provider endpoints ---
    openai_base_url: str = "https://api.openai.com/v1"
    deepseek_base_url: str = "https://api.deepseek.com/v1"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"

    # --- OpenRouter ---
    # 进程级共享密钥，用户未提供密钥时作为免费档回退
    openrouter_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("POLYCHAT_OPENROUTER_API_KEY", "OPENROUTER_API_KEY"),
    )
    openrouter_referer: str = "https://ecoswitch.replit.app"
    openrouter_title: str = "EcoSwitch AI"
    openrouter_data_policy: str = "allow"

    # --- Timeouts (seconds) ---
    credential_verify_timeout: float = 5.0
    # None 表示不限制，交给上游自身的超时
    upstream_timeout: float | None = 120.0

    @property
    def has_openrouter_server_key(self) -> bool:
        return bool(self.openrouter_api_key and self.openrouter_api_key.strip())


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

__all__ = ["Settings", "get_settings", "settings"]
