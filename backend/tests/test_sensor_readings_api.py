from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.schemas.sensors import SensorReadingResponse, SensorResponse
from tests.support import ApiTestCase


class SensorApiTests(ApiTestCase):
    def test_create_sensor_applies_defaults(self) -> None:
        device = self.create_device()

        sensor = self.create_sensor(device["id"])

        self.assertEqual(sensor["calibration_factor"], 1)
        self.assertTrue(sensor["is_active"])
        self.assertEqual(SensorResponse.model_validate(sensor).model_dump(mode="json"), sensor)

    def test_create_sensor_for_unknown_device(self) -> None:
        response = self.client.post(
            "/api/sensors",
            json={
                "device_id": 99,
                "type": "humidity",
                "name": "Cabinet humidity",
                "unit": "%",
                "min_value": 0,
                "max_value": 100,
            },
        )

        self.assertEqual(response.status_code, 404)

    def test_list_sensors_by_device(self) -> None:
        first = self.create_device(name="First")
        second = self.create_device(name="Second")
        self.create_sensor(first["id"], name="A")
        self.create_sensor(second["id"], name="B")
        self.create_sensor(second["id"], name="C", type="pressure", unit="hPa")

        all_sensors = self.client.get("/api/sensors").json()
        second_sensors = self.client.get("/api/sensors", params={"device_id": second["id"]}).json()

        self.assertEqual(len(all_sensors), 3)
        self.assertEqual([sensor["name"] for sensor in second_sensors], ["B", "C"])


class SensorReadingApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.device = self.create_device()
        self.sensor = self.create_sensor(self.device["id"])

    def _post_reading(self, **payload: object):
        return self.client.post("/api/sensor-readings", json={"sensor_id": self.sensor["id"], **payload})

    def test_minimal_reading_gets_defaults(self) -> None:
        before = datetime.now(timezone.utc) - timedelta(seconds=1)

        response = self._post_reading(value=21.5)

        self.assertEqual(response.status_code, 201, response.text)
        reading = response.json()
        self.assertEqual(reading["value"], 21.5)
        self.assertIsNone(reading["raw_value"])
        self.assertIsNone(reading["quality_score"])
        stamped = datetime.fromisoformat(reading["timestamp"].replace("Z", "+00:00"))
        self.assertGreaterEqual(stamped, before)
        self.assertEqual(SensorReadingResponse.model_validate(reading).model_dump(mode="json"), reading)

    def test_quality_score_out_of_range_rejected(self) -> None:
        response = self._post_reading(value=1.0, quality_score=1.5)

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["detail"][0]["loc"], ["body", "quality_score"])

    def test_reading_for_unknown_sensor(self) -> None:
        response = self.client.post("/api/sensor-readings", json={"sensor_id": 404, "value": 1.0})

        self.assertEqual(response.status_code, 404)

    def test_reading_advances_device_last_seen(self) -> None:
        self._post_reading(value=1.0, timestamp="2026-03-01T10:00:00Z")
        self._post_reading(value=2.0, timestamp="2026-03-01T09:00:00Z")

        devices = self.client.get("/api/devices").json()

        self.assertEqual(devices[0]["last_seen"], "2026-03-01T10:00:00Z")

    def test_future_reading_does_not_move_last_seen_ahead(self) -> None:
        later = datetime.now(timezone.utc) + timedelta(days=2)

        response = self._post_reading(value=1.0, timestamp=later.isoformat())
        after = datetime.now(timezone.utc)

        self.assertEqual(response.status_code, 201, response.text)
        last_seen = self.client.get("/api/devices").json()[0]["last_seen"]
        self.assertLessEqual(datetime.fromisoformat(last_seen.replace("Z", "+00:00")), after)

    def test_range_query_is_inclusive_and_newest_first(self) -> None:
        for hour in range(6):
            self._post_reading(value=float(hour), timestamp=f"2026-03-01T{hour:02d}:00:00Z")

        response = self.client.get(
            "/api/sensor-readings",
            params={
                "sensor_id": self.sensor["id"],
                "start_date": "2026-03-01T01:00:00Z",
                "end_date": "2026-03-01T04:00:00Z",
            },
        )

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual([reading["value"] for reading in response.json()], [4.0, 3.0, 2.0, 1.0])

    def test_range_query_limit(self) -> None:
        for minute in range(5):
            self._post_reading(value=float(minute), timestamp=f"2026-03-01T12:{minute:02d}:00Z")

        default = self.client.get("/api/sensor-readings", params={"sensor_id": self.sensor["id"]})
        limited = self.client.get("/api/sensor-readings", params={"sensor_id": self.sensor["id"], "limit": 2})
        too_many = self.client.get("/api/sensor-readings", params={"sensor_id": self.sensor["id"], "limit": 1001})
        zero = self.client.get("/api/sensor-readings", params={"sensor_id": self.sensor["id"], "limit": 0})

        self.assertEqual(len(default.json()), 5)
        self.assertEqual([reading["value"] for reading in limited.json()], [4.0, 3.0])
        self.assertEqual(too_many.status_code, 422)
        self.assertEqual(zero.status_code, 422)

    def test_inverted_range_rejected(self) -> None:
        response = self.client.get(
            "/api/sensor-readings",
            params={
                "sensor_id": self.sensor["id"],
                "start_date": "2026-03-02T00:00:00Z",
                "end_date": "2026-03-01T00:00:00Z",
            },
        )

        self.assertEqual(response.status_code, 422)
