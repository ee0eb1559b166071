"""
Provider 路由核心：凭据校验、路由、适配器与响应标准化。
"""

from .errors import ProviderError
from .normalizer import NormalizedMessage, normalize_response
from .router import classify_model, route
from .types import (
    Credential,
    ModelParameters,
    ProviderId,
    RoutingDecision,
    RoutingRequest,
)

__all__ = [
    "Credential",
    "ModelParameters",
    "NormalizedMessage",
    "ProviderError",
    "ProviderId",
    "RoutingDecision",
    "RoutingRequest",
    "classify_model",
    "normalize_response",
    "route",
]
