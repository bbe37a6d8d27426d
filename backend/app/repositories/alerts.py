from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import Alert


class AlertStateError(ValueError):
    """Raised when an alert transition would move its flags backwards or skip a step."""


def list_alerts(db: Session, *, device_id: int | None = None) -> list[Alert]:
    statement = select(Alert)
    if device_id is not None:
        statement = statement.where(Alert.device_id == device_id)
    statement = statement.order_by(Alert.created_at.desc(), Alert.id.desc())
    return list(db.scalars(statement))


def get_alert_by_id(db: Session, alert_id: int) -> Alert | None:
    return db.get(Alert, alert_id)


def create_alert(
    db: Session,
    *,
    device_id: int | None,
    sensor_id: int | None,
    alert_type: str,
    severity: str,
    title: str,
    message: str,
) -> Alert:
    alert = Alert(
        device_id=device_id,
        sensor_id=sensor_id,
        type=alert_type,
        severity=severity,
        title=title,
        message=message,
        acknowledged=False,
        resolved=False,
    )
    db.add(alert)
    db.commit()
    db.refresh(alert)
    return alert


def acknowledge_alert(
    db: Session,
    alert: Alert,
    *,
    user_id: int,
    acknowledged_at: datetime | None = None,
) -> Alert:
    if alert.acknowledged:
        raise AlertStateError("Alert is already acknowledged")

    alert.acknowledged = True
    alert.acknowledged_by = user_id
    alert.acknowledged_at = acknowledged_at or datetime.now(timezone.utc)
    db.add(alert)
    db.commit()
    db.refresh(alert)
    return alert


def resolve_alert(db: Session, alert: Alert, *, resolved_at: datetime | None = None) -> Alert:
    if alert.resolved:
        raise AlertStateError("Alert is already resolved")
    if not alert.acknowledged:
        raise AlertStateError("Alert must be acknowledged before it is resolved")

    alert.resolved = True
    alert.resolved_at = resolved_at or datetime.now(timezone.utc)
    db.add(alert)
    db.commit()
    db.refresh(alert)
    return alert
