from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.deps import get_db
from app.errors import conflict, not_found
from app.schemas.conversation import (
    ConversationCreateRequest,
    ConversationDetailResponse,
    ConversationResponse,
    MessageCreateRequest,
    MessageResponse,
)
from app.services.conversation_service import (
    ConversationNotFoundError,
    ConversationServiceError,
    append_message,
    create_conversation,
    delete_all_conversations,
    delete_conversation,
    get_conversation,
    list_conversations,
)

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.post(
    "",
    response_model=ConversationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_conversation_endpoint(
    payload: ConversationCreateRequest,
    db: Session = Depends(get_db),
) -> ConversationResponse:
    conversation = create_conversation(db, payload)
    return ConversationResponse.model_validate(conversation)


@router.get("", response_model=list[ConversationResponse])
def list_conversations_endpoint(db: Session = Depends(get_db)) -> list[ConversationResponse]:
    """按时间倒序返回全部会话（不含消息）。"""
    return [ConversationResponse.model_validate(item) for item in list_conversations(db)]


@router.get("/{conversation_id}", response_model=ConversationDetailResponse)
def get_conversation_endpoint(
    conversation_id: UUID,
    db: Session = Depends(get_db),
) -> ConversationDetailResponse:
    try:
        conversation = get_conversation(db, conversation_id)
    except ConversationNotFoundError:
        raise not_found(f"Conversation {conversation_id} not found")
    return ConversationDetailResponse.model_validate(conversation)


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_conversation_endpoint(
    conversation_id: UUID,
    db: Session = Depends(get_db),
) -> Response:
    delete_conversation(db, conversation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_all_conversations_endpoint(db: Session = Depends(get_db)) -> Response:
    delete_all_conversations(db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def append_message_endpoint(
    conversation_id: UUID,
    payload: MessageCreateRequest,
    db: Session = Depends(get_db),
) -> MessageResponse:
    try:
        message = append_message(db, conversation_id, payload)
    except ConversationNotFoundError:
        raise not_found(f"Conversation {conversation_id} not found")
    except ConversationServiceError as exc:
        raise conflict(str(exc))
    return MessageResponse.model_validate(message)


__all__ = ["router"]
