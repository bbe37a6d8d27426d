from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.dependencies import get_chat_query_service
from app.repositories.chat import (
    create_conversation,
    create_message,
    get_conversation_by_id,
    list_conversations,
    list_messages,
)
from app.repositories.users import get_user_by_id
from app.schemas.chat import (
    ChatConversationCreateRequest,
    ChatConversationResponse,
    ChatMessageCreateRequest,
    ChatMessageResponse,
    ChatQueryRequest,
)
from app.services.chat_query import ChatDocumentsNotFoundError, ChatQueryService


router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post(
    "/conversations",
    response_model=ChatConversationResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createChatConversation",
)
def post_conversation(
    payload: ChatConversationCreateRequest,
    db: Session = Depends(get_db),
) -> ChatConversationResponse:
    if get_user_by_id(db, payload.user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    conversation = create_conversation(db, user_id=payload.user_id, title=payload.title)
    return ChatConversationResponse.model_validate(conversation)


@router.get(
    "/conversations",
    response_model=list[ChatConversationResponse],
    operation_id="getChatConversations",
)
def get_conversations(user_id: int, db: Session = Depends(get_db)) -> list[ChatConversationResponse]:
    return [
        ChatConversationResponse.model_validate(conversation)
        for conversation in list_conversations(db, user_id=user_id)
    ]


@router.post(
    "/messages",
    response_model=ChatMessageResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createChatMessage",
)
def post_message(payload: ChatMessageCreateRequest, db: Session = Depends(get_db)) -> ChatMessageResponse:
    conversation = get_conversation_by_id(db, payload.conversation_id)
    if conversation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")

    message = create_message(
        db,
        conversation,
        role=payload.role,
        content=payload.content,
        document_references=payload.document_references,
        metadata_json=payload.metadata,
    )
    return ChatMessageResponse.model_validate(message)


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=list[ChatMessageResponse],
    operation_id="getChatMessages",
)
def get_messages(conversation_id: int, db: Session = Depends(get_db)) -> list[ChatMessageResponse]:
    if get_conversation_by_id(db, conversation_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return [
        ChatMessageResponse.model_validate(message)
        for message in list_messages(db, conversation_id=conversation_id)
    ]


@router.post("/query", response_model=ChatMessageResponse, operation_id="chatQuery")
def post_chat_query(
    payload: ChatQueryRequest,
    db: Session = Depends(get_db),
    chat_service: ChatQueryService = Depends(get_chat_query_service),
) -> ChatMessageResponse:
    conversation = get_conversation_by_id(db, payload.conversation_id)
    if conversation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")

    try:
        answer = chat_service.query(
            db,
            conversation,
            message=payload.message,
            document_ids=payload.document_ids,
        )
    except ChatDocumentsNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Documents not found", "document_ids": exc.missing_ids},
        )
    return ChatMessageResponse.model_validate(answer)
