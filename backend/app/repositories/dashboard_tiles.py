from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import DashboardTile


def list_tiles(db: Session, *, user_id: int, visible_only: bool = False) -> list[DashboardTile]:
    statement = select(DashboardTile).where(DashboardTile.user_id == user_id)
    if visible_only:
        statement = statement.where(DashboardTile.is_visible.is_(True))
    statement = statement.order_by(
        DashboardTile.position_y.asc(),
        DashboardTile.position_x.asc(),
        DashboardTile.id.asc(),
    )
    return list(db.scalars(statement))


def get_tile_by_id(db: Session, tile_id: int) -> DashboardTile | None:
    return db.get(DashboardTile, tile_id)


def create_tile(
    db: Session,
    *,
    user_id: int,
    tile_type: str,
    title: str,
    position_x: int,
    position_y: int,
    width: int,
    height: int,
    config: dict[str, Any] | None,
    is_visible: bool,
) -> DashboardTile:
    tile = DashboardTile(
        user_id=user_id,
        type=tile_type,
        title=title,
        position_x=position_x,
        position_y=position_y,
        width=width,
        height=height,
        config=config,
        is_visible=is_visible,
    )
    db.add(tile)
    db.commit()
    db.refresh(tile)
    return tile


def update_tile(
    db: Session,
    tile: DashboardTile,
    *,
    title: str | None = None,
    position_x: int | None = None,
    position_y: int | None = None,
    width: int | None = None,
    height: int | None = None,
    config: dict[str, Any] | None = None,
    is_visible: bool | None = None,
) -> DashboardTile:
    if title is not None:
        tile.title = title
    if position_x is not None:
        tile.position_x = position_x
    if position_y is not None:
        tile.position_y = position_y
    if width is not None:
        tile.width = width
    if height is not None:
        tile.height = height
    if config is not None:
        tile.config = config
    if is_visible is not None:
        tile.is_visible = is_visible

    db.add(tile)
    db.commit()
    db.refresh(tile)
    return tile


def delete_tile(db: Session, tile: DashboardTile) -> None:
    db.delete(tile)
    db.commit()
