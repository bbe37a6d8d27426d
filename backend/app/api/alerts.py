from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.repositories.alerts import (
    AlertStateError,
    acknowledge_alert,
    create_alert,
    get_alert_by_id,
    list_alerts,
    resolve_alert,
)
from app.repositories.devices import get_device_by_id
from app.repositories.sensors import get_sensor_by_id
from app.repositories.users import get_user_by_id
from app.schemas.alerts import AlertAcknowledgeRequest, AlertCreateRequest, AlertResponse


router = APIRouter(prefix="/api", tags=["alerts"])


@router.post(
    "/alerts",
    response_model=AlertResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createAlert",
)
def post_alert(payload: AlertCreateRequest, db: Session = Depends(get_db)) -> AlertResponse:
    if payload.device_id is not None and get_device_by_id(db, payload.device_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not found")
    if payload.sensor_id is not None and get_sensor_by_id(db, payload.sensor_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sensor not found")

    alert = create_alert(
        db,
        device_id=payload.device_id,
        sensor_id=payload.sensor_id,
        alert_type=payload.type,
        severity=payload.severity,
        title=payload.title,
        message=payload.message,
    )
    return AlertResponse.model_validate(alert)


@router.get("/alerts", response_model=list[AlertResponse], operation_id="getAlerts")
def get_alerts(device_id: int | None = None, db: Session = Depends(get_db)) -> list[AlertResponse]:
    return [AlertResponse.model_validate(alert) for alert in list_alerts(db, device_id=device_id)]


@router.post(
    "/alerts/{alert_id}/acknowledge",
    response_model=AlertResponse,
    operation_id="acknowledgeAlert",
)
def post_acknowledge_alert(
    alert_id: int,
    payload: AlertAcknowledgeRequest,
    db: Session = Depends(get_db),
) -> AlertResponse:
    alert = get_alert_by_id(db, alert_id)
    if alert is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alert not found")
    if get_user_by_id(db, payload.user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    try:
        acknowledged = acknowledge_alert(db, alert, user_id=payload.user_id)
    except AlertStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return AlertResponse.model_validate(acknowledged)


@router.post("/alerts/{alert_id}/resolve", response_model=AlertResponse, operation_id="resolveAlert")
def post_resolve_alert(alert_id: int, db: Session = Depends(get_db)) -> AlertResponse:
    alert = get_alert_by_id(db, alert_id)
    if alert is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alert not found")

    try:
        resolved = resolve_alert(db, alert)
    except AlertStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return AlertResponse.model_validate(resolved)
