from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.dependencies import parse_query_contract
from app.repositories.devices import get_device_by_id
from app.repositories.sensors import (
    create_sensor,
    create_sensor_reading,
    get_sensor_by_id,
    list_sensor_readings,
    list_sensors,
)
from app.schemas.sensors import (
    SensorCreateRequest,
    SensorReadingCreateRequest,
    SensorReadingQuery,
    SensorReadingResponse,
    SensorResponse,
)


router = APIRouter(prefix="/api", tags=["sensors"])


@router.post(
    "/sensors",
    response_model=SensorResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createSensor",
)
def post_sensor(payload: SensorCreateRequest, db: Session = Depends(get_db)) -> SensorResponse:
    if get_device_by_id(db, payload.device_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not found")

    sensor = create_sensor(
        db,
        device_id=payload.device_id,
        sensor_type=payload.type,
        name=payload.name,
        unit=payload.unit,
        min_value=payload.min_value,
        max_value=payload.max_value,
        calibration_factor=payload.calibration_factor,
        is_active=payload.is_active,
    )
    return SensorResponse.model_validate(sensor)


@router.get("/sensors", response_model=list[SensorResponse], operation_id="getSensors")
def get_sensors(
    device_id: int | None = None,
    db: Session = Depends(get_db),
) -> list[SensorResponse]:
    return [SensorResponse.model_validate(sensor) for sensor in list_sensors(db, device_id=device_id)]


@router.post(
    "/sensor-readings",
    response_model=SensorReadingResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createSensorReading",
)
def post_sensor_reading(
    payload: SensorReadingCreateRequest,
    db: Session = Depends(get_db),
) -> SensorReadingResponse:
    sensor = get_sensor_by_id(db, payload.sensor_id)
    if sensor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sensor not found")

    reading = create_sensor_reading(
        db,
        sensor,
        value=payload.value,
        raw_value=payload.raw_value,
        quality_score=payload.quality_score,
        reading_ts=payload.timestamp,
    )
    return SensorReadingResponse.model_validate(reading)


@router.get(
    "/sensor-readings",
    response_model=list[SensorReadingResponse],
    operation_id="getSensorReadings",
)
def get_sensor_readings(
    sensor_id: int,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> list[SensorReadingResponse]:
    query = parse_query_contract(
        SensorReadingQuery,
        sensor_id=sensor_id,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )
    readings = list_sensor_readings(
        db,
        sensor_id=query.sensor_id,
        start_ts=query.start_date,
        end_ts=query.end_date,
        limit=query.limit,
    )
    return [SensorReadingResponse.model_validate(reading) for reading in readings]
