from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.dependencies import get_dashboard_export_service
from app.repositories.dashboard_stats import get_dashboard_stats
from app.repositories.dashboard_tiles import (
    create_tile,
    delete_tile,
    get_tile_by_id,
    list_tiles,
    update_tile,
)
from app.repositories.users import get_user_by_id
from app.schemas.dashboard import (
    DashboardExportRequest,
    DashboardExportResponse,
    DashboardStatsResponse,
    DashboardTileCreateRequest,
    DashboardTileResponse,
    DashboardTileUpdateRequest,
)
from app.services.dashboard_export import DashboardExportError, DashboardExportService


router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.post(
    "/tiles",
    response_model=DashboardTileResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createDashboardTile",
)
def post_tile(payload: DashboardTileCreateRequest, db: Session = Depends(get_db)) -> DashboardTileResponse:
    if get_user_by_id(db, payload.user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    tile = create_tile(
        db,
        user_id=payload.user_id,
        tile_type=payload.type,
        title=payload.title,
        position_x=payload.position_x,
        position_y=payload.position_y,
        width=payload.width,
        height=payload.height,
        config=payload.config,
        is_visible=payload.is_visible,
    )
    return DashboardTileResponse.model_validate(tile)


@router.get("/tiles", response_model=list[DashboardTileResponse], operation_id="getDashboardTiles")
def get_tiles(user_id: int, db: Session = Depends(get_db)) -> list[DashboardTileResponse]:
    return [DashboardTileResponse.model_validate(tile) for tile in list_tiles(db, user_id=user_id)]


@router.put("/tiles/{tile_id}", response_model=DashboardTileResponse, operation_id="updateDashboardTile")
def put_tile(
    tile_id: int,
    payload: DashboardTileUpdateRequest,
    db: Session = Depends(get_db),
) -> DashboardTileResponse:
    if payload.id != tile_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Body id does not match path id")

    tile = get_tile_by_id(db, tile_id)
    if tile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dashboard tile not found")

    updated = update_tile(db, tile, **payload.model_dump(exclude_unset=True, exclude={"id"}))
    return DashboardTileResponse.model_validate(updated)


@router.delete(
    "/tiles/{tile_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="deleteDashboardTile",
)
def delete_tile_endpoint(tile_id: int, db: Session = Depends(get_db)) -> Response:
    tile = get_tile_by_id(db, tile_id)
    if tile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dashboard tile not found")

    delete_tile(db, tile)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/stats", response_model=DashboardStatsResponse, operation_id="getDashboardStats")
def get_stats(db: Session = Depends(get_db)) -> DashboardStatsResponse:
    stats = get_dashboard_stats(db)
    return DashboardStatsResponse(
        total_devices=stats.total_devices,
        online_devices=stats.online_devices,
        offline_devices=stats.offline_devices,
        total_sensors=stats.total_sensors,
        active_alerts=stats.active_alerts,
        energy_consumption_today=stats.energy_consumption_today,
        air_quality_average=stats.air_quality_average,
    )


@router.post("/export", response_model=DashboardExportResponse, operation_id="exportDashboard")
def post_export(
    payload: DashboardExportRequest,
    db: Session = Depends(get_db),
    export_service: DashboardExportService = Depends(get_dashboard_export_service),
) -> DashboardExportResponse:
    if get_user_by_id(db, payload.user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if payload.tile_ids is None:
        tiles = list_tiles(db, user_id=payload.user_id, visible_only=True)
    else:
        owned = {tile.id: tile for tile in list_tiles(db, user_id=payload.user_id)}
        missing_ids = [tile_id for tile_id in payload.tile_ids if tile_id not in owned]
        if missing_ids:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"message": "Dashboard tiles not found", "tile_ids": missing_ids},
            )
        tiles = [owned[tile_id] for tile_id in dict.fromkeys(payload.tile_ids)]

    if not tiles:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No dashboard tiles to export")

    try:
        result = export_service.export(
            db,
            user_id=payload.user_id,
            tiles=tiles,
            export_format=payload.format,
        )
    except DashboardExportError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    return DashboardExportResponse.model_validate(result)
