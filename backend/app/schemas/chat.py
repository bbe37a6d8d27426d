from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import OpenMap, UtcDatetime, normalize_required_text, reject_null

MessageRole = Literal["user", "assistant"]


class ChatConversationCreateRequest(BaseModel):
    user_id: int = Field(ge=1)
    title: str = Field(min_length=1)

    @field_validator("title", mode="before")
    @classmethod
    def _trim_title(cls, value: Any) -> Any:
        return normalize_required_text(value)


class ChatConversationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class ChatMessageCreateRequest(BaseModel):
    conversation_id: int = Field(ge=1)
    role: MessageRole
    content: str = Field(min_length=1)
    document_references: list[int] | None = None
    metadata: OpenMap | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _trim_content(cls, value: Any) -> Any:
        return normalize_required_text(value)

    @field_validator("document_references", "metadata", mode="before")
    @classmethod
    def _no_null(cls, value: Any) -> Any:
        return reject_null(value)


class ChatQueryRequest(BaseModel):
    conversation_id: int = Field(ge=1)
    message: str = Field(min_length=1)
    document_ids: list[int] | None = None

    @field_validator("message", mode="before")
    @classmethod
    def _trim_message(cls, value: Any) -> Any:
        return normalize_required_text(value)

    @field_validator("document_ids", mode="before")
    @classmethod
    def _no_null(cls, value: Any) -> Any:
        return reject_null(value)


class ChatMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: int
    role: MessageRole
    content: str
    document_references: list[int] | None
    metadata: OpenMap | None = Field(validation_alias=AliasChoices("metadata_json", "metadata"))
    created_at: UtcDatetime
