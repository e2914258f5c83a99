"""Domain models shared by every layer."""

from .models import (
    DocumentMetadata,
    IndexedRecord,
    IndexInfo,
    InitializationResult,
    KnowledgeBaseState,
    QueryType,
    RAGResponse,
    RawDocument,
    RecordMetadata,
    ScoredRecord,
    SourceReference,
)

__all__ = [
    "DocumentMetadata",
    "IndexedRecord",
    "IndexInfo",
    "InitializationResult",
    "KnowledgeBaseState",
    "QueryType",
    "RAGResponse",
    "RawDocument",
    "RecordMetadata",
    "ScoredRecord",
    "SourceReference",
]
