"""Common utilities and shared functionality.

Helpers and the exception family used across the crawler, the index and the
answering pipeline.
"""

from .exception_handler import format_exception_json, get_http_status_code, log_exception
from .exceptions import (
    ConfigurationError,
    DataIngestionError,
    EmbeddingError,
    EmptyCorpusError,
    EmptyQueryError,
    FitnessRAGError,
    KnowledgeBaseError,
    LLMError,
    MissingAPIKeyError,
    NotInitializedError,
    ValidationError,
    VectorStoreError,
)
from .utils import clean_whitespace, normalize_text, truncate

__all__ = [
    # Utilities
    "normalize_text",
    "clean_whitespace",
    "truncate",
    # Base exception
    "FitnessRAGError",
    # Exception categories
    "ConfigurationError",
    "MissingAPIKeyError",
    "KnowledgeBaseError",
    "EmptyCorpusError",
    "NotInitializedError",
    "VectorStoreError",
    "EmbeddingError",
    "LLMError",
    "DataIngestionError",
    "ValidationError",
    "EmptyQueryError",
    # Exception handlers
    "format_exception_json",
    "log_exception",
    "get_http_status_code",
]
