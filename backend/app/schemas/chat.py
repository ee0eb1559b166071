from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.provider.types import DEFAULT_SYSTEM_PROMPT, ProviderId


class ImageURL(BaseModel):
    url: str


class ContentBlock(BaseModel):
    type: Literal["text", "image_url"]
    text: str | None = None
    image_url: ImageURL | None = None


MessageContent = str | ContentBlock | list[str | ContentBlock]


class ChatMessage(BaseModel):
    role: str
    content: MessageContent

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class CredentialInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(default="", alias="apiKey")
    # UI 侧在线校验的结果
    verified: bool = False


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(default="", alias="apiKey")
    model: str
    provider: ProviderId
    messages: list[ChatMessage] = Field(..., min_length=1)
    temperature: float | None = Field(default=None, ge=0, le=2)
    max_tokens: int | None = Field(default=None, ge=1, le=4096)
    presence_penalty: float | None = Field(default=None, ge=-2, le=2)
    frequency_penalty: float | None = Field(default=None, ge=-2, le=2)
    system_prompt: str | None = Field(default=DEFAULT_SYSTEM_PROMPT, alias="systemPrompt")
    credentials: dict[ProviderId, CredentialInput] = Field(default_factory=dict)


class AssistantMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str
    provider: ProviderId
    model: str | None = None


class ChatChoice(BaseModel):
    index: int = 0
    message: AssistantMessage
    finish_reason: str = "stop"


class RoutingInfo(BaseModel):
    requested_provider: ProviderId
    requested_model: str
    effective_provider: ProviderId
    effective_model: str
    reason: str
    use_server_credential: bool = False


class ChatCompletionResponse(BaseModel):
    id: str
    object: str = "chat.completion"
    created: int
    model: str
    provider: ProviderId
    choices: list[ChatChoice]
    message: AssistantMessage
    routing: RoutingInfo
    issue: str | None = None
    usage: dict[str, Any] | None = None


class ValidateKeyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(..., alias="apiKey")
    current_provider: ProviderId | None = Field(default=None, alias="currentProvider")


class PreferenceUpdateResponse(BaseModel):
    provider: ProviderId
    model: str


class ValidateKeyResponse(BaseModel):
    valid: bool
    preference: PreferenceUpdateResponse | None = None


class VerifyOpenRouterResponse(BaseModel):
    connected: bool


__all__ = [
    "AssistantMessage",
    "ChatChoice",
    "ChatCompletionResponse",
    "ChatMessage",
    "ChatRequest",
    "ContentBlock",
    "CredentialInput",
    "ImageURL",
    "MessageContent",
    "PreferenceUpdateResponse",
    "RoutingInfo",
    "ValidateKeyRequest",
    "ValidateKeyResponse",
    "VerifyOpenRouterResponse",
]
