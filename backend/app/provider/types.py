"""
Provider 路由核心的数据类型：凭据、模型参数、模型分类（tagged union）与路由决策。
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field


class ProviderId(enum.StrEnum):
    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    OPENROUTER = "openrouter"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    ProviderId.OPENAI: "OpenAI",
    ProviderId.DEEPSEEK: "DeepSeek",
    ProviderId.OPENROUTER: "OpenRouter",
}


@dataclass(frozen=True)
class Credential:
    """
    单个 Provider 的凭据状态。

    - format_valid：同步格式校验结果；
    - live_valid：在线校验（list-models）结果；
    - 不变式：raw_value 为空时 live_valid 不可能为 True。
    """

    provider: ProviderId
    raw_value: str = ""
    format_valid: bool = False
    live_valid: bool = False

    def __post_init__(self) -> None:
        if self.live_valid and not self.present:
            raise ValueError("live_valid credential must carry a non-empty value")

    @property
    def present(self) -> bool:
        return bool(self.raw_value and self.raw_value.strip())

    @property
    def valid(self) -> bool:
        return self.present and self.format_valid and self.live_valid

    def cleared(self) -> Credential:
        return Credential(provider=self.provider)


DEFAULT_SYSTEM_PROMPT = "Respond to the user's questions concisely and helpfully."


@dataclass(frozen=True)
class ModelParameters:
    temperature: float = 0.7
    max_tokens: int = 1000
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0
    system_prompt: str | None = DEFAULT_SYSTEM_PROMPT


# ---- 模型分类：由 classify_model 产生，Router 中做穷尽匹配 ----


@dataclass(frozen=True)
class OpenAIModel:
    name: str
    provider: ProviderId = field(default=ProviderId.OPENAI, init=False)


@dataclass(frozen=True)
class DeepSeekModel:
    name: str
    provider: ProviderId = field(default=ProviderId.DEEPSEEK, init=False)


@dataclass(frozen=True)
class OpenRouterModel:
    name: str
    provider: ProviderId = field(default=ProviderId.OPENROUTER, init=False)


ModelKind = OpenAIModel | DeepSeekModel | OpenRouterModel


class RoutingReason(enum.StrEnum):
    REQUESTED = "requested"
    INFERRED_FROM_MODEL = "inferred_from_model"
    IMAGE_OVERRIDE = "image_override"
    OPENROUTER_FALLBACK = "openrouter_fallback"


@dataclass(frozen=True)
class RoutingRequest:
    requested_model: str
    requested_provider: ProviderId
    has_image: bool = False
    credentials: Mapping[ProviderId, Credential] = field(default_factory=dict)
    openrouter_server_available: bool = False

    def credential(self, provider: ProviderId) -> Credential:
        return self.credentials.get(provider) or Credential(provider=provider)


@dataclass(frozen=True)
class RoutingDecision:
    requested_provider: ProviderId
    requested_model: str
    effective_provider: ProviderId
    effective_model: str
    reason: RoutingReason
    # 仅 OpenRouter：用户密钥不可用时改用进程级共享密钥
    use_server_credential: bool = False

    def as_dict(self) -> dict[str, object]:
        return {
            "requested_provider": self.requested_provider.value,
            "requested_model": self.requested_model,
            "effective_provider": self.effective_provider.value,
            "effective_model": self.effective_model,
            "reason": self.reason.value,
            "use_server_credential": self.use_server_credential,
        }


__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "Credential",
    "DeepSeekModel",
    "ModelKind",
    "ModelParameters",
    "OpenAIModel",
    "OpenRouterModel",
    "ProviderId",
    "RoutingDecision",
    "RoutingReason",
    "RoutingRequest",
]
