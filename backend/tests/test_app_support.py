from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from unittest import TestCase

from fastapi.testclient import TestClient

from app.core.logging import configure_logging
from app.db.base import Base
from app.db.session import build_session_factory, create_db_engine, get_db
from app.main import app
from app.services.file_store import FileStoreError, LocalFileStore


class LocalFileStoreTests(TestCase):
    def setUp(self) -> None:
        workdir = tempfile.TemporaryDirectory()
        self.addCleanup(workdir.cleanup)
        self.store = LocalFileStore(workdir.name)

    def test_relative_paths_resolve_under_root(self) -> None:
        resolved = self.store.resolve("reports/q1.pdf")

        self.assertEqual(resolved, self.store.root / "reports" / "q1.pdf")

    def test_paths_outside_root_rejected(self) -> None:
        with self.assertRaises(FileStoreError):
            self.store.resolve("../escape.txt")
        with self.assertRaises(FileStoreError):
            self.store.resolve("/etc/passwd")

    def test_absolute_path_inside_root_accepted(self) -> None:
        inside = str(self.store.root / "a.txt")

        self.assertEqual(self.store.resolve(inside), Path(inside))


class ConfigureLoggingTests(TestCase):
    def _restore_handlers(self, before: list[logging.Handler]) -> None:
        root = logging.getLogger()
        for handler in list(root.handlers):
            if handler not in before:
                root.removeHandler(handler)

    def test_installs_single_handler(self) -> None:
        root = logging.getLogger()
        before = list(root.handlers)
        level = root.level
        self.addCleanup(root.setLevel, level)
        self.addCleanup(self._restore_handlers, before)

        configure_logging("debug")
        configure_logging("warning")

        tagged = [handler for handler in root.handlers if getattr(handler, "_smart_grid_handler", False)]
        self.assertEqual(len(tagged), 1)
        self.assertEqual(root.level, logging.WARNING)


class HealthAndStatusTests(TestCase):
    def setUp(self) -> None:
        engine = create_db_engine("sqlite://")
        Base.metadata.create_all(engine)
        self.addCleanup(engine.dispose)
        session_factory = build_session_factory(engine)

        def override_get_db():
            db = session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.addCleanup(app.dependency_overrides.clear)
        self.client = TestClient(app)

    def test_health(self) -> None:
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_status_reports_database(self) -> None:
        response = self.client.get("/status")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["db"], {"ok": True})
        self.assertIn("services", response.json())

    def test_operation_ids_match_procedures(self) -> None:
        operation_ids = {
            operation["operationId"]
            for path in app.openapi()["paths"].values()
            for operation in path.values()
        }

        for name in (
            "healthcheck",
            "createUser",
            "getDevices",
            "createSensorReading",
            "processDocument",
            "chatQuery",
            "getDashboardStats",
            "exportDashboard",
            "resolveAlert",
        ):
            self.assertIn(name, operation_ids)
