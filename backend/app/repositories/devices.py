from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import Device

_UNSET: Any = object()


def list_devices(
    db: Session,
    *,
    device_type: str | None = None,
    status: str | None = None,
    limit: int = 100,
) -> list[Device]:
    statement = select(Device)
    if device_type is not None:
        statement = statement.where(Device.type == device_type)
    if status is not None:
        statement = statement.where(Device.status == status)
    statement = statement.order_by(Device.id.asc()).limit(limit)
    return list(db.scalars(statement))


def get_device_by_id(db: Session, device_id: int) -> Device | None:
    return db.get(Device, device_id)


def create_device(
    db: Session,
    *,
    name: str,
    device_type: str,
    status: str,
    location: str | None,
    latitude: float | None,
    longitude: float | None,
    metadata_json: dict[str, Any] | None,
) -> Device:
    device = Device(
        name=name,
        type=device_type,
        status=status,
        location=location,
        latitude=latitude,
        longitude=longitude,
        metadata_json=metadata_json,
    )
    db.add(device)
    db.commit()
    db.refresh(device)
    return device


def update_device(
    db: Session,
    device: Device,
    *,
    name: str | None = None,
    status: str | None = None,
    location: str | None = _UNSET,
    latitude: float | None = _UNSET,
    longitude: float | None = _UNSET,
    metadata_json: dict[str, Any] | None = None,
) -> Device:
    if name is not None:
        device.name = name
    if status is not None:
        device.status = status
    # location and coordinates may be cleared, so absence is tracked separately from null
    if location is not _UNSET:
        device.location = location
    if latitude is not _UNSET:
        device.latitude = latitude
    if longitude is not _UNSET:
        device.longitude = longitude
    if metadata_json is not None:
        device.metadata_json = metadata_json

    db.add(device)
    db.commit()
    db.refresh(device)
    return device
