from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import Document


def list_documents(db: Session, *, user_id: int) -> list[Document]:
    statement = (
        select(Document)
        .where(Document.user_id == user_id)
        .order_by(Document.created_at.desc(), Document.id.desc())
    )
    return list(db.scalars(statement))


def get_document_by_id(db: Session, document_id: int) -> Document | None:
    return db.get(Document, document_id)


def get_documents_by_ids(db: Session, document_ids: list[int]) -> list[Document]:
    if not document_ids:
        return []
    statement = select(Document).where(Document.id.in_(document_ids)).order_by(Document.id.asc())
    return list(db.scalars(statement))


def create_document(
    db: Session,
    *,
    user_id: int,
    filename: str,
    original_filename: str,
    file_type: str,
    file_size: int,
    file_path: str,
    metadata_json: dict[str, Any] | None,
) -> Document:
    document = Document(
        user_id=user_id,
        filename=filename,
        original_filename=original_filename,
        file_type=file_type,
        file_size=file_size,
        file_path=file_path,
        processed=False,
        metadata_json=metadata_json,
    )
    db.add(document)
    db.commit()
    db.refresh(document)
    return document


def mark_document_processed(
    db: Session,
    document: Document,
    *,
    extracted_text: str | None,
    summary: str | None,
    extraction: dict[str, Any],
) -> Document:
    metadata = dict(document.metadata_json or {})
    metadata["extraction"] = extraction

    document.extracted_text = extracted_text
    document.summary = summary
    document.metadata_json = metadata
    document.processed = True

    db.add(document)
    db.commit()
    db.refresh(document)
    return document
