from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest import TestCase

from app.repositories.dashboard_stats import DashboardStats, start_of_utc_day
from app.schemas.dashboard import DashboardTileResponse
from app.services.dashboard_export import DashboardExportService, headline_for_tile
from tests.support import ApiTestCase


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class DashboardHelperTests(TestCase):
    def test_start_of_utc_day_converts_offsets(self) -> None:
        local = datetime(2026, 3, 2, 1, 30, tzinfo=timezone(timedelta(hours=2)))

        self.assertEqual(start_of_utc_day(local), datetime(2026, 3, 1, tzinfo=timezone.utc))

    def test_headline_for_tile(self) -> None:
        stats = DashboardStats(
            total_devices=4,
            online_devices=3,
            offline_devices=1,
            total_sensors=9,
            active_alerts=2,
            energy_consumption_today=12.5,
            air_quality_average=41.26,
        )

        self.assertEqual(headline_for_tile("device_status", stats), "3/4 online")
        self.assertEqual(headline_for_tile("energy_consumption", stats), "12.50 today")
        self.assertEqual(headline_for_tile("air_quality", stats), "avg 41.3")
        self.assertEqual(headline_for_tile("failure_analysis", stats), "2 active alerts")


class DashboardTileApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = self.create_user()

    def _create_tile(self, **overrides: object) -> dict:
        payload = {
            "user_id": self.user["id"],
            "type": "device_status",
            "title": "Devices",
            "position_x": 0,
            "position_y": 0,
            "width": 2,
            "height": 1,
            **overrides,
        }
        response = self.client.post("/api/dashboard/tiles", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def test_create_tile_defaults_visible(self) -> None:
        tile = self._create_tile(config={"refresh_seconds": 30})

        self.assertTrue(tile["is_visible"])
        self.assertEqual(tile["config"], {"refresh_seconds": 30})
        self.assertEqual(DashboardTileResponse.model_validate(tile).model_dump(mode="json"), tile)

    def test_create_tile_validation(self) -> None:
        bad_type = self.client.post(
            "/api/dashboard/tiles",
            json={
                "user_id": self.user["id"],
                "type": "weather",
                "title": "Weather",
                "position_x": 0,
                "position_y": 0,
                "width": 1,
                "height": 1,
            },
        )
        unknown_user = self.client.post(
            "/api/dashboard/tiles",
            json={
                "user_id": 999,
                "type": "air_quality",
                "title": "Air",
                "position_x": 0,
                "position_y": 0,
                "width": 1,
                "height": 1,
            },
        )

        self.assertEqual(bad_type.status_code, 422)
        self.assertEqual(unknown_user.status_code, 404)

    def test_tiles_listed_in_layout_order(self) -> None:
        self._create_tile(title="Bottom", position_y=2)
        self._create_tile(title="Top right", position_x=2)
        self._create_tile(title="Top left")

        listed = self.client.get("/api/dashboard/tiles", params={"user_id": self.user["id"]}).json()

        self.assertEqual([tile["title"] for tile in listed], ["Top left", "Top right", "Bottom"])

    def test_update_tile(self) -> None:
        tile = self._create_tile()

        response = self.client.put(
            f"/api/dashboard/tiles/{tile['id']}",
            json={"id": tile["id"], "width": 4, "is_visible": False},
        )

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["width"], 4)
        self.assertFalse(response.json()["is_visible"])
        self.assertEqual(response.json()["title"], "Devices")

    def test_update_tile_rejects_bad_requests(self) -> None:
        tile = self._create_tile()

        mismatch = self.client.put(f"/api/dashboard/tiles/{tile['id']}", json={"id": tile["id"] + 1, "width": 3})
        unknown = self.client.put("/api/dashboard/tiles/999", json={"id": 999, "width": 3})
        zero_width = self.client.put(f"/api/dashboard/tiles/{tile['id']}", json={"id": tile["id"], "width": 0})

        self.assertEqual(mismatch.status_code, 400)
        self.assertEqual(unknown.status_code, 404)
        self.assertEqual(zero_width.status_code, 422)

    def test_delete_tile(self) -> None:
        tile = self._create_tile()

        deleted = self.client.delete(f"/api/dashboard/tiles/{tile['id']}")
        again = self.client.delete(f"/api/dashboard/tiles/{tile['id']}")

        self.assertEqual(deleted.status_code, 204)
        self.assertEqual(again.status_code, 404)
        self.assertEqual(self.client.get("/api/dashboard/tiles", params={"user_id": self.user["id"]}).json(), [])


class DashboardStatsApiTests(ApiTestCase):
    def test_empty_database(self) -> None:
        response = self.client.get("/api/dashboard/stats")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {
                "total_devices": 0,
                "online_devices": 0,
                "offline_devices": 0,
                "total_sensors": 0,
                "active_alerts": 0,
                "energy_consumption_today": 0.0,
                "air_quality_average": 0.0,
            },
        )

    def test_future_readings_are_not_counted_as_today(self) -> None:
        meter = self.create_device()
        energy = self.create_sensor(meter["id"])
        air = self.create_sensor(meter["id"], type="air_quality", name="PM2.5", unit="ug/m3")
        tomorrow = start_of_utc_day(datetime.now(timezone.utc)) + timedelta(days=1, hours=1)
        for sensor_id in (energy["id"], air["id"]):
            response = self.client.post(
                "/api/sensor-readings",
                json={"sensor_id": sensor_id, "value": 999.0, "timestamp": _iso(tomorrow)},
            )
            self.assertEqual(response.status_code, 201, response.text)

        stats = self.client.get("/api/dashboard/stats").json()

        self.assertEqual(stats["energy_consumption_today"], 0.0)
        self.assertEqual(stats["air_quality_average"], 0.0)

    def test_counts_and_todays_aggregates(self) -> None:
        meter = self.create_device(status="online")
        self.create_device(name="Spare meter")
        self.create_device(name="Gateway", type="gateway", status="maintenance")
        energy = self.create_sensor(meter["id"])
        air = self.create_sensor(meter["id"], type="air_quality", name="PM2.5", unit="ug/m3")

        now = datetime.now(timezone.utc)
        yesterday = start_of_utc_day(now) - timedelta(hours=1)
        for sensor_id, value, stamp in (
            (energy["id"], 5.5, now),
            (energy["id"], 4.5, now),
            (energy["id"], 100.0, yesterday),
            (air["id"], 30.0, now),
            (air["id"], 50.0, now),
            (air["id"], 500.0, yesterday),
        ):
            response = self.client.post(
                "/api/sensor-readings",
                json={"sensor_id": sensor_id, "value": value, "timestamp": _iso(stamp)},
            )
            self.assertEqual(response.status_code, 201, response.text)

        first = self.client.post(
            "/api/alerts",
            json={"type": "overload", "severity": "high", "title": "Overload", "message": "Feeder A at 110%"},
        ).json()
        self.client.post(
            "/api/alerts",
            json={"type": "offline", "severity": "low", "title": "Offline", "message": "Spare meter silent"},
        )
        user = self.create_user()
        self.client.post(f"/api/alerts/{first['id']}/acknowledge", json={"user_id": user["id"]})
        self.client.post(f"/api/alerts/{first['id']}/resolve")

        stats = self.client.get("/api/dashboard/stats").json()

        self.assertEqual(stats["total_devices"], 3)
        self.assertEqual(stats["online_devices"], 1)
        self.assertEqual(stats["offline_devices"], 1)
        self.assertEqual(stats["total_sensors"], 2)
        self.assertEqual(stats["active_alerts"], 1)
        self.assertAlmostEqual(stats["energy_consumption_today"], 10.0)
        self.assertAlmostEqual(stats["air_quality_average"], 40.0)


class DashboardExportApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = self.create_user()
        self.tiles = [
            self._create_tile(type="device_status", title="Devices"),
            self._create_tile(type="energy_consumption", title="Energy", position_x=2),
            self._create_tile(type="air_quality", title="Air", position_y=1, is_visible=False),
        ]

    def _create_tile(self, **overrides: object) -> dict:
        payload = {
            "user_id": self.user["id"],
            "position_x": 0,
            "position_y": 0,
            "width": 2,
            "height": 1,
            **overrides,
        }
        response = self.client.post("/api/dashboard/tiles", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def _assert_exported(self, response, suffix: str) -> Path:
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        path = Path(body["file_path"])
        self.assertTrue(path.is_file())
        self.assertEqual(path.suffix, suffix)
        self.assertEqual(path.parent, Path(self.settings.export_dir))
        self.assertEqual(body["file_size"], path.stat().st_size)
        self.assertGreater(body["file_size"], 0)
        return path

    def test_export_visible_tiles_as_jpg(self) -> None:
        response = self.client.post("/api/dashboard/export", json={"user_id": self.user["id"], "format": "jpg"})

        path = self._assert_exported(response, ".jpg")
        self.assertTrue(path.name.startswith(f"dashboard_{self.user['id']}_"))
        self.assertEqual(path.read_bytes()[:2], b"\xff\xd8")

    def test_export_selected_tiles_as_pdf(self) -> None:
        response = self.client.post(
            "/api/dashboard/export",
            json={"user_id": self.user["id"], "format": "pdf", "tile_ids": [self.tiles[2]["id"]]},
        )

        path = self._assert_exported(response, ".pdf")
        self.assertEqual(path.read_bytes()[:5], b"%PDF-")

    def test_export_rejects_foreign_tiles(self) -> None:
        other = self.create_user(email="other@grid.example")

        response = self.client.post(
            "/api/dashboard/export",
            json={"user_id": other["id"], "format": "pdf", "tile_ids": [self.tiles[0]["id"]]},
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["tile_ids"], [self.tiles[0]["id"]])

    def test_export_without_tiles_conflicts(self) -> None:
        other = self.create_user(email="other@grid.example")

        response = self.client.post("/api/dashboard/export", json={"user_id": other["id"], "format": "jpg"})

        self.assertEqual(response.status_code, 409)

    def test_export_directory_failure_is_reported(self) -> None:
        blocked = self.workdir / "blocked"
        blocked.write_text("not a directory", encoding="utf-8")
        self.app.state.dashboard_export_service = DashboardExportService(
            settings=self.settings.model_copy(update={"export_dir": str(blocked)})
        )

        with self.assertLogs("app.dashboard_export", level="ERROR"):
            response = self.client.post(
                "/api/dashboard/export",
                json={"user_id": self.user["id"], "format": "jpg"},
            )

        self.assertEqual(response.status_code, 500)
        self.assertIn("Dashboard export failed", response.json()["detail"])

    def test_export_unknown_user_and_format(self) -> None:
        unknown = self.client.post("/api/dashboard/export", json={"user_id": 999, "format": "jpg"})
        bad_format = self.client.post("/api/dashboard/export", json={"user_id": self.user["id"], "format": "png"})

        self.assertEqual(unknown.status_code, 404)
        self.assertEqual(bad_format.status_code, 422)
