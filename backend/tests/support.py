from __future__ import annotations

import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest import TestCase

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from app.api.alerts import router as alerts_router
from app.api.chat import router as chat_router
from app.api.dashboard import router as dashboard_router
from app.api.devices import router as devices_router
from app.api.documents import router as documents_router
from app.api.sensors import router as sensors_router
from app.api.users import router as users_router
from app.core.config import Settings
from app.db import models  # noqa: F401
from app.db.base import Base
from app.db.session import build_session_factory, create_db_engine, get_db
from app.main import init_services

ALL_ROUTERS = (
    users_router,
    devices_router,
    sensors_router,
    documents_router,
    chat_router,
    dashboard_router,
    alerts_router,
)


class ApiTestCase(TestCase):
    """Mounts every router on a bare app backed by an in-memory SQLite database."""

    def setUp(self) -> None:
        workdir = tempfile.TemporaryDirectory()
        self.addCleanup(workdir.cleanup)
        self.workdir = Path(workdir.name)
        self.storage_dir = self.workdir / "documents"
        self.storage_dir.mkdir()

        self.settings = Settings(
            database_url="sqlite://",
            document_storage_dir=str(self.storage_dir),
            export_dir=str(self.workdir / "exports"),
            document_summary_chars=80,
            chat_passage_chars=200,
            chat_max_passages=2,
            export_dpi=50,
        )
        engine = create_db_engine(self.settings.database_url)
        Base.metadata.create_all(engine)
        self.addCleanup(engine.dispose)
        self.session_factory: sessionmaker = build_session_factory(engine)

        app = FastAPI()
        for router in ALL_ROUTERS:
            app.include_router(router)
        app.dependency_overrides[get_db] = self._override_get_db
        init_services(app, self.settings)
        self.app = app
        self.client = TestClient(app)

    def _override_get_db(self) -> Generator[Session, None, None]:
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    def create_user(self, email: str = "operator@grid.example", **overrides: object) -> dict:
        payload = {"email": email, "name": "Grid Operator", "role": "operator", **overrides}
        response = self.client.post("/api/users", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def create_device(self, **overrides: object) -> dict:
        payload = {
            "name": "Substation meter",
            "type": "meter",
            "location": "Substation 4",
            "latitude": 52.23,
            "longitude": 21.01,
            **overrides,
        }
        response = self.client.post("/api/devices", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def create_sensor(self, device_id: int, **overrides: object) -> dict:
        payload = {
            "device_id": device_id,
            "type": "energy",
            "name": "Feeder A energy",
            "unit": "kWh",
            "min_value": None,
            "max_value": None,
            **overrides,
        }
        response = self.client.post("/api/sensors", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()
