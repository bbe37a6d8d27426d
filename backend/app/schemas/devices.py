from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from app.schemas.common import OpenMap, UtcDatetime, normalize_required_text, reject_null

DeviceType = Literal["sensor", "meter", "gateway", "controller"]
DeviceStatus = Literal["online", "offline", "maintenance", "error"]


class DeviceCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    type: DeviceType
    status: DeviceStatus = "offline"
    # nullable but required: callers must send location/latitude/longitude, possibly as null
    location: str | None
    latitude: float | None = Field(ge=-90.0, le=90.0)
    longitude: float | None = Field(ge=-180.0, le=180.0)
    metadata: OpenMap | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _trim_name(cls, value: Any) -> Any:
        return normalize_required_text(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_not_null(cls, value: Any) -> Any:
        return reject_null(value)


class DeviceUpdateRequest(BaseModel):
    id: int = Field(ge=1)
    name: str | None = Field(default=None, min_length=1)
    status: DeviceStatus | None = None
    location: str | None = None
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    metadata: OpenMap | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _trim_name(cls, value: Any) -> Any:
        return normalize_required_text(reject_null(value))

    @field_validator("status", "metadata", mode="before")
    @classmethod
    def _no_null(cls, value: Any) -> Any:
        return reject_null(value)

    @model_validator(mode="after")
    def _require_change(self) -> "DeviceUpdateRequest":
        if not self.model_fields_set - {"id"}:
            raise ValueError("At least one field must be provided for update")
        return self


class DeviceQuery(BaseModel):
    type: DeviceType | None = None
    status: DeviceStatus | None = None
    limit: int = Field(default=100, gt=0, le=1000)


class DeviceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: DeviceType
    status: DeviceStatus
    location: str | None
    latitude: float | None
    longitude: float | None
    last_seen: UtcDatetime | None
    metadata: OpenMap | None = Field(validation_alias=AliasChoices("metadata_json", "metadata"))
    created_at: UtcDatetime
    updated_at: UtcDatetime
