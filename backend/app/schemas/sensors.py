from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.schemas.common import UtcDatetime, normalize_required_text, reject_null, utc_now

SensorType = Literal["air_quality", "energy", "temperature", "humidity", "pressure"]


class SensorCreateRequest(BaseModel):
    device_id: int = Field(ge=1)
    type: SensorType
    name: str = Field(min_length=1)
    unit: str = Field(min_length=1, max_length=32)
    min_value: float | None
    max_value: float | None
    calibration_factor: float = 1.0
    is_active: bool = True

    @field_validator("name", "unit", mode="before")
    @classmethod
    def _trim_text(cls, value: Any) -> Any:
        return normalize_required_text(value)

    @field_validator("calibration_factor", "is_active", mode="before")
    @classmethod
    def _no_null(cls, value: Any) -> Any:
        return reject_null(value)


class SensorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    device_id: int
    type: SensorType
    name: str
    unit: str
    min_value: float | None
    max_value: float | None
    calibration_factor: float = 1.0
    is_active: bool = True
    created_at: UtcDatetime
    updated_at: UtcDatetime


class SensorReadingCreateRequest(BaseModel):
    sensor_id: int = Field(ge=1)
    value: float
    raw_value: float | None = None
    quality_score: float | None = Field(default=None, ge=0.0, le=1.0)
    timestamp: UtcDatetime = Field(default_factory=utc_now)

    @field_validator("raw_value", "quality_score", "timestamp", mode="before")
    @classmethod
    def _no_null(cls, value: Any) -> Any:
        return reject_null(value)


class SensorReadingQuery(BaseModel):
    sensor_id: int = Field(ge=1)
    start_date: UtcDatetime | None = None
    end_date: UtcDatetime | None = None
    limit: int = Field(default=100, gt=0, le=1000)

    @model_validator(mode="after")
    def _check_range(self) -> "SensorReadingQuery":
        if self.start_date is not None and self.end_date is not None and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class SensorReadingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sensor_id: int
    value: float
    raw_value: float | None
    quality_score: float | None = Field(ge=0.0, le=1.0)
    timestamp: UtcDatetime
    created_at: UtcDatetime
