from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import OpenMap, UtcDatetime, normalize_required_text, reject_null

DocumentType = Literal["pdf", "docx", "txt", "png", "jpg"]


class DocumentUploadRequest(BaseModel):
    user_id: int = Field(ge=1)
    filename: str = Field(min_length=1)
    original_filename: str = Field(min_length=1)
    file_type: DocumentType
    file_size: int = Field(ge=0)
    file_path: str = Field(min_length=1)
    metadata: OpenMap | None = None

    @field_validator("filename", "original_filename", "file_path", mode="before")
    @classmethod
    def _trim_text(cls, value: Any) -> Any:
        return normalize_required_text(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_not_null(cls, value: Any) -> Any:
        return reject_null(value)


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    filename: str
    original_filename: str
    file_type: DocumentType
    file_size: int = Field(ge=0)
    file_path: str
    processed: bool = False
    summary: str | None
    extracted_text: str | None
    metadata: OpenMap | None = Field(validation_alias=AliasChoices("metadata_json", "metadata"))
    created_at: UtcDatetime
    updated_at: UtcDatetime
