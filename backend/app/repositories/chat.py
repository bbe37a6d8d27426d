from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import ChatConversation, ChatMessage


def list_conversations(db: Session, *, user_id: int) -> list[ChatConversation]:
    statement = (
        select(ChatConversation)
        .where(ChatConversation.user_id == user_id)
        .order_by(ChatConversation.updated_at.desc(), ChatConversation.id.desc())
    )
    return list(db.scalars(statement))


def get_conversation_by_id(db: Session, conversation_id: int) -> ChatConversation | None:
    return db.get(ChatConversation, conversation_id)


def create_conversation(db: Session, *, user_id: int, title: str) -> ChatConversation:
    conversation = ChatConversation(user_id=user_id, title=title)
    db.add(conversation)
    db.commit()
    db.refresh(conversation)
    return conversation


def list_messages(db: Session, *, conversation_id: int) -> list[ChatMessage]:
    statement = (
        select(ChatMessage)
        .where(ChatMessage.conversation_id == conversation_id)
        .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
    )
    return list(db.scalars(statement))


def create_message(
    db: Session,
    conversation: ChatConversation,
    *,
    role: str,
    content: str,
    document_references: list[int] | None,
    metadata_json: dict[str, Any] | None,
    commit: bool = True,
) -> ChatMessage:
    message = ChatMessage(
        conversation_id=conversation.id,
        role=role,
        content=content,
        document_references=document_references,
        metadata_json=metadata_json,
    )
    conversation.updated_at = datetime.now(timezone.utc)
    db.add(conversation)
    db.add(message)
    if commit:
        db.commit()
        db.refresh(message)
    else:
        db.flush()
    return message
