from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.schemas.common import OpenMap, UtcDatetime, normalize_required_text, reject_null

TileType = Literal[
    "energy_consumption",
    "air_quality",
    "device_status",
    "network_map",
    "power_stats",
    "failure_analysis",
]
ExportFormat = Literal["jpg", "pdf"]


class DashboardTileCreateRequest(BaseModel):
    user_id: int = Field(ge=1)
    type: TileType
    title: str = Field(min_length=1)
    position_x: int = Field(ge=0)
    position_y: int = Field(ge=0)
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    config: OpenMap | None = None
    is_visible: bool = True

    @field_validator("title", mode="before")
    @classmethod
    def _trim_title(cls, value: Any) -> Any:
        return normalize_required_text(value)

    @field_validator("config", "is_visible", mode="before")
    @classmethod
    def _no_null(cls, value: Any) -> Any:
        return reject_null(value)


class DashboardTileUpdateRequest(BaseModel):
    id: int = Field(ge=1)
    title: str | None = Field(default=None, min_length=1)
    position_x: int | None = Field(default=None, ge=0)
    position_y: int | None = Field(default=None, ge=0)
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    config: OpenMap | None = None
    is_visible: bool | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _trim_title(cls, value: Any) -> Any:
        return normalize_required_text(reject_null(value))

    @field_validator("position_x", "position_y", "width", "height", "config", "is_visible", mode="before")
    @classmethod
    def _no_null(cls, value: Any) -> Any:
        return reject_null(value)

    @model_validator(mode="after")
    def _require_change(self) -> "DashboardTileUpdateRequest":
        if not self.model_fields_set - {"id"}:
            raise ValueError("At least one field must be provided for update")
        return self


class DashboardTileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: TileType
    title: str
    position_x: int = Field(ge=0)
    position_y: int = Field(ge=0)
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    config: OpenMap | None
    is_visible: bool = True
    created_at: UtcDatetime
    updated_at: UtcDatetime


class DashboardStatsResponse(BaseModel):
    total_devices: int
    online_devices: int
    offline_devices: int
    total_sensors: int
    active_alerts: int
    energy_consumption_today: float
    air_quality_average: float


class DashboardExportRequest(BaseModel):
    user_id: int = Field(ge=1)
    format: ExportFormat
    tile_ids: list[int] | None = None

    @field_validator("tile_ids", mode="before")
    @classmethod
    def _no_null(cls, value: Any) -> Any:
        return reject_null(value)


class DashboardExportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    file_path: str
    file_size: int = Field(ge=0)
    created_at: UtcDatetime
