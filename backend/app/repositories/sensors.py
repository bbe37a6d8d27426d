from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import Device, Sensor, SensorReading


def list_sensors(db: Session, *, device_id: int | None = None) -> list[Sensor]:
    statement = select(Sensor)
    if device_id is not None:
        statement = statement.where(Sensor.device_id == device_id)
    statement = statement.order_by(Sensor.id.asc())
    return list(db.scalars(statement))


def get_sensor_by_id(db: Session, sensor_id: int) -> Sensor | None:
    return db.get(Sensor, sensor_id)


def create_sensor(
    db: Session,
    *,
    device_id: int,
    sensor_type: str,
    name: str,
    unit: str,
    min_value: float | None,
    max_value: float | None,
    calibration_factor: float,
    is_active: bool,
) -> Sensor:
    sensor = Sensor(
        device_id=device_id,
        type=sensor_type,
        name=name,
        unit=unit,
        min_value=min_value,
        max_value=max_value,
        calibration_factor=calibration_factor,
        is_active=is_active,
    )
    db.add(sensor)
    db.commit()
    db.refresh(sensor)
    return sensor


def create_sensor_reading(
    db: Session,
    sensor: Sensor,
    *,
    value: float,
    raw_value: float | None,
    quality_score: float | None,
    reading_ts: datetime,
) -> SensorReading:
    reading = SensorReading(
        sensor_id=sensor.id,
        value=value,
        raw_value=raw_value,
        quality_score=quality_score,
        timestamp=reading_ts,
    )
    db.add(reading)
    _touch_device_last_seen(db, sensor.device_id, reading_ts)
    db.commit()
    db.refresh(reading)
    return reading


def list_sensor_readings(
    db: Session,
    *,
    sensor_id: int,
    start_ts: datetime | None = None,
    end_ts: datetime | None = None,
    limit: int = 100,
) -> list[SensorReading]:
    statement = select(SensorReading).where(SensorReading.sensor_id == sensor_id)
    if start_ts is not None:
        statement = statement.where(SensorReading.timestamp >= start_ts)
    if end_ts is not None:
        statement = statement.where(SensorReading.timestamp <= end_ts)
    statement = statement.order_by(SensorReading.timestamp.desc(), SensorReading.id.desc()).limit(limit)
    return list(db.scalars(statement))


def _touch_device_last_seen(db: Session, device_id: int, reading_ts: datetime) -> None:
    device = db.get(Device, device_id)
    if device is None:
        return
    # never later than the moment the reading is stored
    seen = min(_as_utc(reading_ts), datetime.now(timezone.utc))
    if device.last_seen is None or _as_utc(device.last_seen) < seen:
        device.last_seen = seen
        db.add(device)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
