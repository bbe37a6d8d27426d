from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.dependencies import get_document_processing_service
from app.repositories.documents import create_document, get_document_by_id, list_documents
from app.repositories.users import get_user_by_id
from app.schemas.documents import DocumentResponse, DocumentUploadRequest
from app.services.document_processing import (
    DocumentExtractionError,
    DocumentFileMissingError,
    DocumentProcessingService,
)


router = APIRouter(prefix="/api", tags=["documents"])


@router.post(
    "/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="uploadDocument",
)
def post_document(payload: DocumentUploadRequest, db: Session = Depends(get_db)) -> DocumentResponse:
    if get_user_by_id(db, payload.user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    document = create_document(
        db,
        user_id=payload.user_id,
        filename=payload.filename,
        original_filename=payload.original_filename,
        file_type=payload.file_type,
        file_size=payload.file_size,
        file_path=payload.file_path,
        metadata_json=payload.metadata,
    )
    return DocumentResponse.model_validate(document)


@router.get("/documents", response_model=list[DocumentResponse], operation_id="getDocuments")
def get_documents(user_id: int, db: Session = Depends(get_db)) -> list[DocumentResponse]:
    return [DocumentResponse.model_validate(document) for document in list_documents(db, user_id=user_id)]


@router.post(
    "/documents/{document_id}/process",
    response_model=DocumentResponse,
    operation_id="processDocument",
)
def post_process_document(
    document_id: int,
    db: Session = Depends(get_db),
    processing_service: DocumentProcessingService = Depends(get_document_processing_service),
) -> DocumentResponse:
    document = get_document_by_id(db, document_id)
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")

    try:
        processed = processing_service.process(db, document)
    except DocumentFileMissingError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except DocumentExtractionError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return DocumentResponse.model_validate(processed)
