from .chat import (
    AssistantMessage,
    ChatChoice,
    ChatCompletionResponse,
    ChatMessage,
    ChatRequest,
    ContentBlock,
    CredentialInput,
    ImageURL,
    MessageContent,
    PreferenceUpdateResponse,
    RoutingInfo,
    ValidateKeyRequest,
    ValidateKeyResponse,
    VerifyOpenRouterResponse,
)
from .conversation import (
    ConversationCreateRequest,
    ConversationDetailResponse,
    ConversationResponse,
    MessageCreateRequest,
    MessageResponse,
)

__all__ = [
    "AssistantMessage",
    "ChatChoice",
    "ChatCompletionResponse",
    "ChatMessage",
    "ChatRequest",
    "ContentBlock",
    "ConversationCreateRequest",
    "ConversationDetailResponse",
    "ConversationResponse",
    "CredentialInput",
    "ImageURL",
    "MessageContent",
    "MessageCreateRequest",
    "MessageResponse",
    "PreferenceUpdateResponse",
    "RoutingInfo",
    "ValidateKeyRequest",
    "ValidateKeyResponse",
    "VerifyOpenRouterResponse",
]
