from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import UtcDatetime, normalize_required_text, reject_null

AlertSeverity = Literal["low", "medium", "high", "critical"]


class AlertCreateRequest(BaseModel):
    device_id: int | None = Field(default=None, ge=1)
    sensor_id: int | None = Field(default=None, ge=1)
    type: str = Field(min_length=1, max_length=128)
    severity: AlertSeverity
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)

    @field_validator("type", "title", "message", mode="before")
    @classmethod
    def _trim_text(cls, value: Any) -> Any:
        return normalize_required_text(value)

    @field_validator("device_id", "sensor_id", mode="before")
    @classmethod
    def _no_null(cls, value: Any) -> Any:
        return reject_null(value)


class AlertAcknowledgeRequest(BaseModel):
    user_id: int = Field(ge=1)


class AlertResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    device_id: int | None
    sensor_id: int | None
    type: str
    severity: AlertSeverity
    title: str
    message: str
    acknowledged: bool = False
    acknowledged_by: int | None
    acknowledged_at: UtcDatetime | None
    resolved: bool = False
    resolved_at: UtcDatetime | None
    created_at: UtcDatetime
