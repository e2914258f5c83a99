"""Domain models for the fitness knowledge base."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

RECORD_ORIGIN = "web"


class QueryType(Enum):
    """Kind of question routed to a specialised answerer configuration."""

    GENERAL = "general"
    WORKOUT = "workout"
    FORM = "form"
    NUTRITION = "nutrition"


class KnowledgeBaseState(Enum):
    """Lifecycle of the knowledge base held by the orchestrator."""

    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    BUILT = "built"
    READY = "ready"


@dataclass(frozen=True)
class DocumentMetadata:
    """Best-effort metadata scraped alongside a page's text."""

    description: str | None = None
    author: str | None = None
    publish_date: str | None = None
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class RawDocument:
    """One fetched and cleaned web page, keyed by URL."""

    url: str
    title: str
    content: str
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)


@dataclass(frozen=True)
class RecordMetadata:
    """Metadata projection stored next to each embedded record."""

    url: str
    title: str
    description: str | None = None
    author: str | None = None
    publish_date: str | None = None
    tags: tuple[str, ...] = ()
    origin: str = RECORD_ORIGIN

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "author": self.author,
            "publish_date": self.publish_date,
            "tags": list(self.tags),
            "origin": self.origin,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecordMetadata:
        return cls(
            url=data["url"],
            title=data.get("title") or "Untitled",
            description=data.get("description"),
            author=data.get("author"),
            publish_date=data.get("publish_date"),
            tags=tuple(data.get("tags") or ()),
            origin=data.get("origin", RECORD_ORIGIN),
        )


@dataclass(frozen=True)
class IndexedRecord:
    """The unit stored in the knowledge index: composite text plus metadata."""

    text: str
    metadata: RecordMetadata

    @classmethod
    def from_document(cls, doc: RawDocument) -> IndexedRecord:
        """Build the embeddable record for a crawled page.

        The composite text keeps one labelled line per field so the embedding
        sees the title, description and tags as well as the body.
        """
        meta = doc.metadata
        text = "\n".join(
            [
                f"Title: {doc.title}",
                f"URL: {doc.url}",
                f"Description: {meta.description or ''}",
                f"Content: {doc.content}",
                f"Tags: {', '.join(meta.tags)}",
                f"Author: {meta.author or ''}",
                f"Published: {meta.publish_date or ''}",
            ]
        )
        return cls(
            text=text,
            metadata=RecordMetadata(
                url=doc.url,
                title=doc.title,
                description=meta.description,
                author=meta.author,
                publish_date=meta.publish_date,
                tags=meta.tags,
            ),
        )


@dataclass(frozen=True)
class ScoredRecord:
    """A search hit; higher scores mean more similar (cosine similarity)."""

    record: IndexedRecord
    score: float


@dataclass(frozen=True)
class SourceReference:
    """Where part of an answer came from."""

    url: str
    title: str
    relevance_score: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "title": self.title, "relevance_score": self.relevance_score}


@dataclass
class RAGResponse:
    """Answer produced by the retrieval-augmented answerer."""

    answer: str
    sources: list[SourceReference]
    context: str


@dataclass(frozen=True)
class InitializationResult:
    """Outcome of ``KnowledgeBaseManager.initialize``."""

    success: bool
    message: str


@dataclass(frozen=True)
class IndexInfo:
    """Read-only snapshot of the knowledge index."""

    is_loaded: bool
    store_path: str
    document_count: int
    exists_on_disk: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_loaded": self.is_loaded,
            "store_path": self.store_path,
            "document_count": self.document_count,
            "exists_on_disk": self.exists_on_disk,
        }
