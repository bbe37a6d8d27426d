from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Protocol

from sqlalchemy.orm import Session

from app.core.config import Settings
from app.db.models import ChatConversation, ChatMessage, Document
from app.repositories.chat import create_message
from app.repositories.documents import get_documents_by_ids

NO_MATCH_REPLY = (
    "I could not find anything about that in the referenced documents. "
    "Process a document or reference one that covers the topic and ask again."
)

_TERM_PATTERN = re.compile(r"[^\W\d_]{3,}", re.UNICODE)


class ChatDocumentsNotFoundError(LookupError):
    def __init__(self, missing_ids: list[int]):
        super().__init__(f"Documents not found: {missing_ids}")
        self.missing_ids = missing_ids


@dataclass(frozen=True)
class Passage:
    document_id: int
    source: str
    text: str
    score: int


@dataclass(frozen=True)
class ChatReply:
    content: str
    document_ids: list[int]
    metadata: dict[str, object] = field(default_factory=dict)


class ChatResponder(Protocol):
    name: str

    def reply(self, message: str, documents: list[Document]) -> ChatReply: ...


def query_terms(text: str) -> list[str]:
    seen: dict[str, None] = {}
    for match in _TERM_PATTERN.findall(text.lower()):
        seen.setdefault(match, None)
    return list(seen)


def split_passages(text: str, max_chars: int) -> list[str]:
    passages: list[str] = []
    for block in re.split(r"\n\s*\n", text):
        cleaned = re.sub(r"\s+", " ", block).strip()
        while len(cleaned) > max_chars:
            boundary = cleaned.rfind(" ", 0, max_chars)
            if boundary <= 0:
                boundary = max_chars
            passages.append(cleaned[:boundary].strip())
            cleaned = cleaned[boundary:].strip()
        if cleaned:
            passages.append(cleaned)
    return passages


class DocumentContextResponder:
    """Answers from the extracted text of the documents a question references.

    Passages are ranked by how many distinct query terms they contain; ties keep
    document order so the reply is deterministic.
    """

    name = "document_context"

    def __init__(self, *, passage_chars: int, max_passages: int):
        self._passage_chars = passage_chars
        self._max_passages = max_passages

    def reply(self, message: str, documents: list[Document]) -> ChatReply:
        terms = query_terms(message)
        ranked = self.rank_passages(terms, documents)
        if not ranked:
            return ChatReply(
                content=NO_MATCH_REPLY,
                document_ids=[],
                metadata={"responder": self.name, "query_terms": terms, "matched_passages": 0},
            )

        lines = ["Here is what the referenced documents say:"]
        document_ids: list[int] = []
        for passage in ranked:
            lines.append(f"[{passage.source}] {passage.text}")
            if passage.document_id not in document_ids:
                document_ids.append(passage.document_id)
        return ChatReply(
            content="\n\n".join(lines),
            document_ids=document_ids,
            metadata={"responder": self.name, "query_terms": terms, "matched_passages": len(ranked)},
        )

    def rank_passages(self, terms: list[str], documents: list[Document]) -> list[Passage]:
        if not terms:
            return []
        term_set = set(terms)
        candidates: list[Passage] = []
        for document in documents:
            if not document.processed or not document.extracted_text:
                continue
            for text in split_passages(document.extracted_text, self._passage_chars):
                score = len(term_set.intersection(query_terms(text)))
                if score == 0:
                    continue
                candidates.append(
                    Passage(
                        document_id=document.id,
                        source=document.original_filename,
                        text=text,
                        score=score,
                    )
                )
        candidates.sort(key=lambda passage: passage.score, reverse=True)
        return candidates[: self._max_passages]


class ChatQueryService:
    def __init__(self, *, settings: Settings, responder: ChatResponder | None = None):
        self._settings = settings
        self._responder = responder or DocumentContextResponder(
            passage_chars=settings.chat_passage_chars,
            max_passages=settings.chat_max_passages,
        )
        self._logger = logging.getLogger("app.chat_query")

    def query(
        self,
        db: Session,
        conversation: ChatConversation,
        *,
        message: str,
        document_ids: list[int] | None,
    ) -> ChatMessage:
        requested_ids = list(dict.fromkeys(document_ids or []))
        documents = [
            document
            for document in get_documents_by_ids(db, requested_ids)
            if document.user_id == conversation.user_id
        ]
        found_ids = {document.id for document in documents}
        missing_ids = [document_id for document_id in requested_ids if document_id not in found_ids]
        if missing_ids:
            raise ChatDocumentsNotFoundError(missing_ids)

        create_message(
            db,
            conversation,
            role="user",
            content=message,
            document_references=requested_ids or None,
            metadata_json=None,
            commit=False,
        )
        reply = self._responder.reply(message, documents)
        answer = create_message(
            db,
            conversation,
            role="assistant",
            content=reply.content,
            document_references=reply.document_ids or None,
            metadata_json=dict(reply.metadata),
        )
        self._logger.info(
            "answered chat query conversation_id=%s documents=%s matched=%s",
            conversation.id,
            len(documents),
            reply.metadata.get("matched_passages"),
        )
        return answer
