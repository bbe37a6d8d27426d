import matplotlib

matplotlib.use("Agg")  # non-interactive backend, must be selected before pyplot is imported
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import matplotlib.pyplot as plt
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.db.models import DashboardTile
from app.repositories.dashboard_stats import DashboardStats, get_dashboard_stats

GRID_CELL_INCHES = 1.6


class DashboardExportError(RuntimeError):
    pass


@dataclass(frozen=True)
class ExportResult:
    file_path: str
    file_size: int
    created_at: datetime


def headline_for_tile(tile_type: str, stats: DashboardStats) -> str:
    if tile_type == "energy_consumption":
        return f"{stats.energy_consumption_today:.2f} today"
    if tile_type == "air_quality":
        return f"avg {stats.air_quality_average:.1f}"
    if tile_type == "device_status":
        return f"{stats.online_devices}/{stats.total_devices} online"
    if tile_type == "network_map":
        return f"{stats.total_devices} devices"
    if tile_type == "power_stats":
        return f"{stats.total_sensors} sensors"
    if tile_type == "failure_analysis":
        return f"{stats.active_alerts} active alerts"
    return ""


class DashboardExportService:
    def __init__(self, *, settings: Settings):
        self._settings = settings
        self._export_dir = Path(settings.export_dir)
        self._logger = logging.getLogger("app.dashboard_export")
        self.colors = {
            "background": "#10161f",
            "tile": "#1c2633",
            "border": "#3b4a5c",
            "title": "#f1f5f9",
            "muted": "#94a3b8",
            "headline": "#38bdf8",
        }

    def export(
        self,
        db: Session,
        *,
        user_id: int,
        tiles: list[DashboardTile],
        export_format: str,
    ) -> ExportResult:
        if not tiles:
            raise DashboardExportError("No dashboard tiles to export")

        stats = get_dashboard_stats(db)
        created_at = datetime.now(timezone.utc)
        target = self._export_dir / f"dashboard_{user_id}_{created_at.strftime('%Y%m%dT%H%M%S%fZ')}.{export_format}"

        try:
            self._export_dir.mkdir(parents=True, exist_ok=True)
            figure = self._render(tiles, stats)
            try:
                figure.savefig(
                    target,
                    format=export_format,
                    dpi=self._settings.export_dpi,
                    facecolor=figure.get_facecolor(),
                )
            finally:
                plt.close(figure)
        except Exception as exc:
            self._logger.exception("dashboard export failed user_id=%s format=%s", user_id, export_format)
            raise DashboardExportError(f"Dashboard export failed: {exc}") from exc

        file_size = target.stat().st_size
        self._logger.info(
            "exported dashboard user_id=%s tiles=%s format=%s bytes=%s",
            user_id,
            len(tiles),
            export_format,
            file_size,
        )
        return ExportResult(file_path=str(target), file_size=file_size, created_at=created_at)

    def _render(self, tiles: list[DashboardTile], stats: DashboardStats):
        grid_width = max(tile.position_x + tile.width for tile in tiles)
        grid_height = max(tile.position_y + tile.height for tile in tiles)

        figure, ax = plt.subplots(figsize=(grid_width * GRID_CELL_INCHES, grid_height * GRID_CELL_INCHES))
        figure.patch.set_facecolor(self.colors["background"])
        ax.set_facecolor(self.colors["background"])
        ax.set_xlim(0, grid_width)
        # grid rows grow downwards like the dashboard layout
        ax.set_ylim(grid_height, 0)
        ax.axis("off")

        for tile in tiles:
            self._draw_tile(ax, tile, stats)

        figure.tight_layout(pad=0.2)
        return figure

    def _draw_tile(self, ax, tile: DashboardTile, stats: DashboardStats) -> None:
        inset = 0.06
        ax.add_patch(
            plt.Rectangle(
                (tile.position_x + inset, tile.position_y + inset),
                tile.width - 2 * inset,
                tile.height - 2 * inset,
                facecolor=self.colors["tile"],
                edgecolor=self.colors["border"],
                linewidth=1.0,
            )
        )
        center_x = tile.position_x + tile.width / 2
        ax.text(
            center_x,
            tile.position_y + 0.3,
            tile.title,
            ha="center",
            va="center",
            color=self.colors["title"],
            fontsize=11,
            fontweight="bold",
        )
        ax.text(
            center_x,
            tile.position_y + tile.height / 2,
            headline_for_tile(tile.type, stats),
            ha="center",
            va="center",
            color=self.colors["headline"],
            fontsize=14,
        )
        ax.text(
            center_x,
            tile.position_y + tile.height - 0.25,
            tile.type.replace("_", " "),
            ha="center",
            va="center",
            color=self.colors["muted"],
            fontsize=8,
        )
