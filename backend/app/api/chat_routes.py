import httpx
from fastapi import APIRouter, Depends

from app.deps import get_app_settings, get_http_client
from app.errors import provider_error
from app.logging_config import logger
from app.provider.credentials import validate_credential, verify_openrouter_connection
from app.provider.errors import ProviderError
from app.provider.types import ProviderId
from app.schemas.chat import (
    ChatCompletionResponse,
    ChatRequest,
    PreferenceUpdateResponse,
    ValidateKeyRequest,
    ValidateKeyResponse,
    VerifyOpenRouterResponse,
)
from app.services.chat_service import send_chat
from app.settings import Settings

router = APIRouter(tags=["chat"])


async def _validate_key(
    provider: ProviderId,
    payload: ValidateKeyRequest,
    client: httpx.AsyncClient,
    settings: Settings,
) -> ValidateKeyResponse:
    outcome = await validate_credential(
        provider,
        payload.api_key,
        client=client,
        settings=settings,
        current_provider=payload.current_provider,
    )
    logger.info("validate-key: provider=%s valid=%s", provider.value, outcome.valid)

    preference = None
    if outcome.preference is not None:
        preference = PreferenceUpdateResponse(
            provider=outcome.preference.provider,
            model=outcome.preference.model,
        )
    return ValidateKeyResponse(valid=outcome.valid, preference=preference)


@router.post("/validate-key", response_model=ValidateKeyResponse)
async def validate_openai_key_endpoint(
    payload: ValidateKeyRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_app_settings),
) -> ValidateKeyResponse:
    """校验 OpenAI 密钥（格式 + /models 在线校验）。"""
    return await _validate_key(ProviderId.OPENAI, payload, client, settings)


@router.post("/validate-deepseek-key", response_model=ValidateKeyResponse)
async def validate_deepseek_key_endpoint(
    payload: ValidateKeyRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_app_settings),
) -> ValidateKeyResponse:
    return await _validate_key(ProviderId.DEEPSEEK, payload, client, settings)


@router.post("/validate-openrouter-key", response_model=ValidateKeyResponse)
async def validate_openrouter_key_endpoint(
    payload: ValidateKeyRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_app_settings),
) -> ValidateKeyResponse:
    return await _validate_key(ProviderId.OPENROUTER, payload, client, settings)


@router.get("/verify-openrouter", response_model=VerifyOpenRouterResponse)
async def verify_openrouter_endpoint(
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_app_settings),
) -> VerifyOpenRouterResponse:
    """检查服务端共享的 OpenRouter 密钥是否可用（免费档兜底）。"""
    connected = await verify_openrouter_connection(client=client, settings=settings)
    return VerifyOpenRouterResponse(connected=connected)


@router.post("/chat", response_model=ChatCompletionResponse)
async def chat_endpoint(
    payload: ChatRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_app_settings),
) -> ChatCompletionResponse:
    try:
        return await send_chat(payload, client=client, settings=settings)
    except ProviderError as exc:
        logger.warning(
            "chat: request failed code=%s provider=%s: %s",
            exc.code,
            exc.provider.value if exc.provider is not None else None,
            exc.message,
        )
        raise provider_error(exc) from exc


__all__ = ["router"]
