"""
Provider 路由：为每次发送决定实际使用的 provider + 模型。

纯函数，无 I/O。规则按顺序匹配：
1. 根据模型字符串推断 provider（`/` -> OpenRouter，已知 OpenAI / DeepSeek 模型 ID）；
2. 带图片时强制 OpenAI + gpt-4o，OpenAI 凭据无效则直接失败，不做回退；
3. 凭据闸门：OpenAI / DeepSeek 凭据无效时统一回退到 OpenRouter 默认模型；
4. OpenRouter 模型一律归一化到允许清单。
"""

from __future__ import annotations

from app.logging_config import logger

from .catalog import (
    OPENAI_VISION_MODEL,
    OPENROUTER_DEFAULT_MODEL,
    is_deepseek_model,
    is_openai_model,
    normalize_openrouter_model,
)
from .errors import NoProviderAvailableError, ProviderUnavailableError
from .types import (
    DeepSeekModel,
    ModelKind,
    OpenAIModel,
    OpenRouterModel,
    ProviderId,
    RoutingDecision,
    RoutingReason,
    RoutingRequest,
)

IMAGE_REQUIRES_OPENAI_MESSAGE = (
    "Image Error: image analysis requires a valid OpenAI credential, "
    "since the other providers don't support image content."
)


def classify_model(model: str, requested_provider: ProviderId) -> ModelKind:
    """把模型字符串归类为三种 provider 模型之一；无法识别时沿用请求的 provider。"""
    if "/" in model:
        return OpenRouterModel(model)
    if is_openai_model(model):
        return OpenAIModel(model)
    if is_deepseek_model(model):
        return DeepSeekModel(model)

    if requested_provider is ProviderId.OPENAI:
        return OpenAIModel(model)
    if requested_provider is ProviderId.DEEPSEEK:
        return DeepSeekModel(model)
    return OpenRouterModel(model)


def _openrouter_usable(request: RoutingRequest) -> bool:
    return (
        request.credential(ProviderId.OPENROUTER).valid or request.openrouter_server_available
    )


def _openrouter_decision(
    request: RoutingRequest, model: str, reason: RoutingReason
) -> RoutingDecision:
    return RoutingDecision(
        requested_provider=request.requested_provider,
        requested_model=request.requested_model,
        effective_provider=ProviderId.OPENROUTER,
        effective_model=normalize_openrouter_model(model),
        reason=reason,
        use_server_credential=not request.credential(ProviderId.OPENROUTER).valid,
    )


def _missing_key_message(provider: ProviderId) -> str:
    if provider is ProviderId.OPENROUTER:
        return (
            "OpenRouter Error: No valid OpenRouter API key available. Please provide a valid "
            "OpenRouter API key or try another API provider."
        )
    name = provider.display_name
    return (
        f"{name} Error: Valid {name} API key required for this model. Please enter a valid "
        f"{name} API key or use OpenRouter AI instead."
    )


def _route_direct(
    request: RoutingRequest, kind: OpenAIModel | DeepSeekModel, reason: RoutingReason
) -> RoutingDecision:
    if request.credential(kind.provider).valid:
        return RoutingDecision(
            requested_provider=request.requested_provider,
            requested_model=request.requested_model,
            effective_provider=kind.provider,
            effective_model=kind.name,
            reason=reason,
        )
    if _openrouter_usable(request):
        # OpenRouter 是唯一的兜底，不做 OpenAI <-> DeepSeek 互相回退
        return _openrouter_decision(
            request, OPENROUTER_DEFAULT_MODEL, RoutingReason.OPENROUTER_FALLBACK
        )
    raise NoProviderAvailableError(_missing_key_message(kind.provider), provider=kind.provider)


def route(request: RoutingRequest) -> RoutingDecision:
    kind = classify_model(request.requested_model, request.requested_provider)
    reason = (
        RoutingReason.REQUESTED
        if kind.provider is request.requested_provider
        else RoutingReason.INFERRED_FROM_MODEL
    )
    if reason is RoutingReason.INFERRED_FROM_MODEL:
        # 模型字符串推断优先于显式 provider 字段
        logger.warning(
            "router: model %r implies provider=%s, overriding requested provider=%s",
            request.requested_model,
            kind.provider.value,
            request.requested_provider.value,
        )

    if request.has_image:
        if not request.credential(ProviderId.OPENAI).valid:
            raise ProviderUnavailableError(
                IMAGE_REQUIRES_OPENAI_MESSAGE, provider=ProviderId.OPENAI
            )
        decision = RoutingDecision(
            requested_provider=request.requested_provider,
            requested_model=request.requested_model,
            effective_provider=ProviderId.OPENAI,
            effective_model=OPENAI_VISION_MODEL,
            reason=RoutingReason.IMAGE_OVERRIDE,
        )
    elif isinstance(kind, OpenRouterModel):
        if not _openrouter_usable(request):
            raise NoProviderAvailableError(
                _missing_key_message(ProviderId.OPENROUTER), provider=ProviderId.OPENROUTER
            )
        decision = _openrouter_decision(request, kind.name, reason)
    elif isinstance(kind, (OpenAIModel, DeepSeekModel)):
        decision = _route_direct(request, kind, reason)
    else:  # pragma: no cover - ModelKind is closed
        raise TypeError(f"unsupported model kind: {kind!r}")

    logger.info(
        "router: requested=%s/%s effective=%s/%s reason=%s server_credential=%s",
        request.requested_provider.value,
        request.requested_model,
        decision.effective_provider.value,
        decision.effective_model,
        decision.reason.value,
        decision.use_server_credential,
    )
    return decision


__all__ = ["IMAGE_REQUIRES_OPENAI_MESSAGE", "classify_model", "route"]
