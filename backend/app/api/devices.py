from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.dependencies import parse_query_contract
from app.repositories.devices import create_device, get_device_by_id, list_devices, update_device
from app.schemas.devices import (
    DeviceCreateRequest,
    DeviceQuery,
    DeviceResponse,
    DeviceStatus,
    DeviceType,
    DeviceUpdateRequest,
)


router = APIRouter(prefix="/api", tags=["devices"])


@router.post(
    "/devices",
    response_model=DeviceResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createDevice",
)
def post_device(payload: DeviceCreateRequest, db: Session = Depends(get_db)) -> DeviceResponse:
    device = create_device(
        db,
        name=payload.name,
        device_type=payload.type,
        status=payload.status,
        location=payload.location,
        latitude=payload.latitude,
        longitude=payload.longitude,
        metadata_json=payload.metadata,
    )
    return DeviceResponse.model_validate(device)


@router.get("/devices", response_model=list[DeviceResponse], operation_id="getDevices")
def get_devices(
    device_type: DeviceType | None = Query(default=None, alias="type"),
    device_status: DeviceStatus | None = Query(default=None, alias="status"),
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> list[DeviceResponse]:
    query = parse_query_contract(DeviceQuery, type=device_type, status=device_status, limit=limit)
    devices = list_devices(db, device_type=query.type, status=query.status, limit=query.limit)
    return [DeviceResponse.model_validate(device) for device in devices]


@router.put("/devices/{device_id}", response_model=DeviceResponse, operation_id="updateDevice")
def put_device(
    device_id: int,
    payload: DeviceUpdateRequest,
    db: Session = Depends(get_db),
) -> DeviceResponse:
    if payload.id != device_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Body id does not match path id")

    device = get_device_by_id(db, device_id)
    if device is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not found")

    updates = payload.model_dump(exclude_unset=True, exclude={"id"})
    if "metadata" in updates:
        updates["metadata_json"] = updates.pop("metadata")
    updated = update_device(db, device, **updates)
    return DeviceResponse.model_validate(updated)
