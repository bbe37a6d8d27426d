from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from docx import Document as DocxDocument
from pypdf import PdfReader
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.db.models import Document
from app.repositories.documents import mark_document_processed
from app.services.file_store import FileStoreError, LocalFileStore

IMAGE_TYPES = {"png", "jpg"}


class DocumentFileMissingError(LookupError):
    pass


class DocumentExtractionError(ValueError):
    pass


@dataclass(frozen=True)
class ExtractionResult:
    method: str
    text: str | None


class DocumentProcessingService:
    def __init__(self, *, settings: Settings, file_store: LocalFileStore):
        self._settings = settings
        self._file_store = file_store
        self._logger = logging.getLogger("app.document_processing")

    def process(self, db: Session, document: Document) -> Document:
        try:
            path = self._file_store.resolve(document.file_path)
        except FileStoreError as exc:
            raise DocumentFileMissingError(str(exc)) from exc
        if not path.is_file():
            raise DocumentFileMissingError(f"Document file not found: {document.file_path}")

        try:
            result = self.extract(path, document.file_type)
        except Exception as exc:
            self._logger.exception(
                "document extraction failed document_id=%s file_type=%s",
                document.id,
                document.file_type,
            )
            raise DocumentExtractionError(f"Could not extract text from {document.original_filename}") from exc

        if result.text is None:
            summary = f"Image: {document.original_filename}"
        else:
            summary = summarize_text(result.text, self._settings.document_summary_chars)

        processed = mark_document_processed(
            db,
            document,
            extracted_text=result.text,
            summary=summary,
            extraction={
                "method": result.method,
                "characters": len(result.text or ""),
                "processed_at": datetime.now(timezone.utc).isoformat(),
            },
        )
        self._logger.info(
            "processed document document_id=%s method=%s characters=%s",
            processed.id,
            result.method,
            len(result.text or ""),
        )
        return processed

    def extract(self, path: Path, file_type: str) -> ExtractionResult:
        if file_type == "txt":
            return ExtractionResult(method="plain_text", text=path.read_text(encoding="utf-8", errors="ignore"))
        if file_type == "pdf":
            reader = PdfReader(str(path))
            pages = [page.extract_text() or "" for page in reader.pages]
            return ExtractionResult(method="pypdf", text="\n".join(pages))
        if file_type == "docx":
            docx = DocxDocument(str(path))
            paragraphs = [paragraph.text for paragraph in docx.paragraphs]
            return ExtractionResult(method="python_docx", text="\n\n".join(paragraphs))
        if file_type in IMAGE_TYPES:
            return ExtractionResult(method="image_listing", text=None)
        raise DocumentExtractionError(f"Unsupported file_type: {file_type}")


def summarize_text(text: str, max_chars: int) -> str:
    collapsed = re.sub(r"\s+", " ", text).strip()
    if len(collapsed) <= max_chars:
        return collapsed
    cut = collapsed[:max_chars]
    boundary = cut.rfind(" ")
    if boundary > 0:
        cut = cut[:boundary]
    return cut.rstrip(" ,;:.") + "..."
