from typing import TYPE_CHECKING, TypeVar

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

if TYPE_CHECKING:
    from app.services.chat_query import ChatQueryService
    from app.services.dashboard_export import DashboardExportService
    from app.services.document_processing import DocumentProcessingService

ContractT = TypeVar("ContractT", bound=BaseModel)


def get_document_processing_service(request: Request) -> "DocumentProcessingService":
    service = getattr(request.app.state, "document_processing_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Document processing service is not initialized")
    return service


def get_chat_query_service(request: Request) -> "ChatQueryService":
    service = getattr(request.app.state, "chat_query_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Chat query service is not initialized")
    return service


def get_dashboard_export_service(request: Request) -> "DashboardExportService":
    service = getattr(request.app.state, "dashboard_export_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Dashboard export service is not initialized")
    return service


def parse_query_contract(contract: type[ContractT], **params: object) -> ContractT:
    values = {key: value for key, value in params.items() if value is not None}
    try:
        return contract.model_validate(values)
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False)
        raise RequestValidationError(
            [{**error, "loc": ("query", *error["loc"])} for error in errors]
        ) from exc
