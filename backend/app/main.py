from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from sqlalchemy.orm import Session

from app.api.alerts import router as alerts_router
from app.api.chat import router as chat_router
from app.api.dashboard import router as dashboard_router
from app.api.devices import router as devices_router
from app.api.documents import router as documents_router
from app.api.sensors import router as sensors_router
from app.api.users import router as users_router
from app.core.config import Settings, get_settings
from app.core.logging import configure_logging
from app.db.session import check_db_connection, get_db
from app.services.chat_query import ChatQueryService
from app.services.dashboard_export import DashboardExportService
from app.services.document_processing import DocumentProcessingService
from app.services.file_store import LocalFileStore


def init_services(app: FastAPI, settings: Settings) -> None:
    app.state.settings = settings
    app.state.document_processing_service = DocumentProcessingService(
        settings=settings,
        file_store=LocalFileStore(settings.document_storage_dir),
    )
    app.state.chat_query_service = ChatQueryService(settings=settings)
    app.state.dashboard_export_service = DashboardExportService(settings=settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_services(app, get_settings())
    yield


app = FastAPI(title="Smart Grid Dashboard Backend", lifespan=lifespan)
app.include_router(users_router)
app.include_router(devices_router)
app.include_router(sensors_router)
app.include_router(documents_router)
app.include_router(chat_router)
app.include_router(dashboard_router)
app.include_router(alerts_router)


@app.get("/health", operation_id="healthcheck")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/status")
def status(request: Request, db: Session = Depends(get_db)):
    db_ok, db_error = check_db_connection(db)
    settings: Settings | None = getattr(request.app.state, "settings", None)

    db_status: dict[str, object] = {"ok": db_ok}
    if db_error:
        db_status["error"] = db_error

    services = {
        name: getattr(request.app.state, name, None) is not None
        for name in (
            "document_processing_service",
            "chat_query_service",
            "dashboard_export_service",
        )
    }

    return {
        "status": "working",
        "service": "backend",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "db": db_status,
        "services": services,
        "config": {
            "document_storage_dir": settings.document_storage_dir if settings else None,
            "export_dir": settings.export_dir if settings else None,
            "document_summary_chars": settings.document_summary_chars if settings else None,
            "chat_passage_chars": settings.chat_passage_chars if settings else None,
            "chat_max_passages": settings.chat_max_passages if settings else None,
            "export_dpi": settings.export_dpi if settings else None,
        },
    }
