from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.db.models import Alert, Device, Sensor, SensorReading


@dataclass(frozen=True)
class DashboardStats:
    total_devices: int
    online_devices: int
    offline_devices: int
    total_sensors: int
    active_alerts: int
    energy_consumption_today: float
    air_quality_average: float


def start_of_utc_day(now: datetime | None = None) -> datetime:
    current = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return current.replace(hour=0, minute=0, second=0, microsecond=0)


def get_dashboard_stats(db: Session, *, now: datetime | None = None) -> DashboardStats:
    day_start = start_of_utc_day(now)
    day_end = day_start + timedelta(days=1)

    device_counts = dict(
        db.execute(select(Device.status, func.count(Device.id)).group_by(Device.status)).all()
    )
    total_devices = sum(int(count) for count in device_counts.values())
    total_sensors = db.scalar(select(func.count(Sensor.id))) or 0
    active_alerts = db.scalar(select(func.count(Alert.id)).where(Alert.resolved.is_(False))) or 0

    energy_today = db.scalar(
        select(func.sum(SensorReading.value))
        .join(Sensor, Sensor.id == SensorReading.sensor_id)
        .where(
            Sensor.type == "energy",
            SensorReading.timestamp >= day_start,
            SensorReading.timestamp < day_end,
        )
    )
    air_quality_avg = db.scalar(
        select(func.avg(SensorReading.value))
        .join(Sensor, Sensor.id == SensorReading.sensor_id)
        .where(
            Sensor.type == "air_quality",
            SensorReading.timestamp >= day_start,
            SensorReading.timestamp < day_end,
        )
    )

    return DashboardStats(
        total_devices=total_devices,
        online_devices=int(device_counts.get("online", 0)),
        offline_devices=int(device_counts.get("offline", 0)),
        total_sensors=int(total_sensors),
        active_alerts=int(active_alerts),
        energy_consumption_today=float(energy_today or 0.0),
        air_quality_average=float(air_quality_avg or 0.0),
    )
