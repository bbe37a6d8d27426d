from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.schemas.common import UtcDatetime, normalize_email, normalize_required_text, reject_null

UserRole = Literal["admin", "operator", "viewer"]
Language = Literal["en", "pl", "de", "uk", "ru"]
Theme = Literal["light", "dark"]


class UserCreateRequest(BaseModel):
    email: str = Field(max_length=320)
    name: str = Field(min_length=1)
    role: UserRole
    language: Language = "en"
    theme: Theme = "light"

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, value: Any) -> Any:
        return normalize_email(value)

    @field_validator("name", mode="before")
    @classmethod
    def _trim_name(cls, value: Any) -> Any:
        return normalize_required_text(value)


class UserUpdateRequest(BaseModel):
    id: int = Field(ge=1)
    email: str | None = Field(default=None, max_length=320)
    name: str | None = Field(default=None, min_length=1)
    role: UserRole | None = None
    language: Language | None = None
    theme: Theme | None = None

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, value: Any) -> Any:
        return normalize_email(reject_null(value))

    @field_validator("name", mode="before")
    @classmethod
    def _trim_name(cls, value: Any) -> Any:
        return normalize_required_text(reject_null(value))

    @field_validator("role", "language", "theme", mode="before")
    @classmethod
    def _no_null(cls, value: Any) -> Any:
        return reject_null(value)

    @model_validator(mode="after")
    def _require_change(self) -> "UserUpdateRequest":
        if not self.model_fields_set - {"id"}:
            raise ValueError("At least one field must be provided for update")
        return self


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: UserRole
    language: Language
    theme: Theme
    created_at: UtcDatetime
    updated_at: UtcDatetime
