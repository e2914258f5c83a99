"""Exception hierarchy for the fitness knowledge base.

Every error raised by the package derives from :class:`FitnessRAGError`,
which carries:
- an error code for quick identification in logs and API payloads
- the class, method, file and line the error was raised from
- the underlying cause, when one exists
- a JSON-serializable ``to_dict`` form for structured logging
"""

import inspect
import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass
class ExceptionContext:
    """Captures location and context where exception occurred."""

    class_name: str
    method_name: str
    file_name: str
    line_number: int
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for JSON serialization."""
        return {
            "class": self.class_name,
            "method": self.method_name,
            "file": self.file_name,
            "line": self.line_number,
            "timestamp": self.timestamp,
        }


class FitnessRAGError(Exception):
    """Base exception for all knowledge base errors.

    Example:
        try:
            index.build(records)
        except OSError as e:
            raise IndexPersistenceError(
                "Failed to write index",
                cause=e,
                context={"store_path": str(store_path)},
            )
    """

    error_code: str = "FIT_ERR_001"

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception with message and optional context.

        Args:
            message: Human-readable error message.
            cause: The underlying exception that caused this error.
            context: Additional context as key-value pairs for debugging.
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.extra_context = context or {}
        self.location = self._capture_location()
        self.stack_trace = traceback.format_exc() if cause else None

    def _capture_location(self) -> ExceptionContext:
        """Capture class/method/file/line of the raise site from the call stack."""
        frame = inspect.currentframe()
        # Walk back from _capture_location through __init__ to the raise site
        for _ in range(2):
            if frame and frame.f_back:
                frame = frame.f_back

        if frame:
            class_instance = frame.f_locals.get("self", None)
            return ExceptionContext(
                class_name=type(class_instance).__name__ if class_instance else "<module>",
                method_name=frame.f_code.co_name,
                file_name=frame.f_code.co_filename.split("\\")[-1].split("/")[-1],
                line_number=frame.f_lineno,
            )
        return ExceptionContext("<unknown>", "<unknown>", "<unknown>", 0)

    def to_dict(self, include_trace: bool = False) -> dict[str, Any]:
        """Convert exception to structured dictionary for JSON output.

        Args:
            include_trace: If True, include full stack trace (debug mode).

        Returns:
            Dictionary with error details, location, and optional trace.
        """
        result: dict[str, Any] = {
            "error": {
                "type": type(self).__name__,
                "code": self.error_code,
                "message": self.message,
            },
            "location": self.location.to_dict(),
        }

        if self.extra_context:
            result["context"] = self.extra_context

        if include_trace and self.stack_trace:
            result["stack_trace"] = [line for line in self.stack_trace.split("\n") if line.strip()]

        if self.cause:
            result["cause"] = {
                "type": type(self.cause).__name__,
                "message": str(self.cause),
            }

        return result


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(FitnessRAGError):
    """Configuration or environment variable errors."""

    error_code = "FIT_CFG_001"


class MissingAPIKeyError(ConfigurationError):
    """Required API key is not configured."""

    error_code = "FIT_CFG_002"


# =============================================================================
# Knowledge Base Lifecycle Errors
# =============================================================================


class KnowledgeBaseError(FitnessRAGError):
    """Base error for knowledge base lifecycle problems."""

    error_code = "FIT_KB_001"


class EmptyCorpusError(KnowledgeBaseError):
    """A build was attempted with zero accepted documents.

    Common causes:
    - Every source URL failed to download
    - No page passed the relevance filter or the minimum length
    """

    error_code = "FIT_KB_002"


class NotInitializedError(KnowledgeBaseError):
    """A query ran before the knowledge base was built or loaded.

    Initialization is explicit: call ``initialize()`` first.
    """

    error_code = "FIT_KB_003"


# =============================================================================
# Vector Store Errors
# =============================================================================


class VectorStoreError(FitnessRAGError):
    """Base error for similarity index operations."""

    error_code = "FIT_VEC_001"


class IndexPersistenceError(VectorStoreError):
    """Failed to write or remove the on-disk index artifacts."""

    error_code = "FIT_VEC_002"


# =============================================================================
# Embedding Errors
# =============================================================================


class EmbeddingError(FitnessRAGError):
    """Failed to generate embeddings."""

    error_code = "FIT_EMB_001"


class EmbeddingAPIError(EmbeddingError):
    """Embedding API returned an error."""

    error_code = "FIT_EMB_002"


class EmbeddingRateLimitError(EmbeddingError):
    """Embedding API rate limit exceeded."""

    error_code = "FIT_EMB_003"


# =============================================================================
# LLM Errors
# =============================================================================


class LLMError(FitnessRAGError):
    """Base error for LLM operations."""

    error_code = "FIT_LLM_001"


class LLMConnectionError(LLMError):
    """Failed to reach the LLM provider.

    Common causes:
    - Invalid API key
    - Network issues
    - Service unavailable
    """

    error_code = "FIT_LLM_002"


class LLMRateLimitError(LLMError):
    """Rate limit exceeded on LLM provider."""

    error_code = "FIT_LLM_003"


class LLMGenerationError(LLMError):
    """The model returned no usable text.

    Common causes:
    - Content filtered by safety settings
    - Token limit exceeded
    """

    error_code = "FIT_LLM_004"


class LLMTimeoutError(LLMError):
    """The LLM call did not finish before its deadline."""

    error_code = "FIT_LLM_005"


# =============================================================================
# Data Ingestion Errors
# =============================================================================


class DataIngestionError(FitnessRAGError):
    """Error during crawling or content extraction."""

    error_code = "FIT_DAT_001"


class FetchError(DataIngestionError):
    """Failed to download or parse a single page."""

    error_code = "FIT_DAT_002"


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(FitnessRAGError):
    """Input validation failed."""

    error_code = "FIT_VAL_001"


class EmptyQueryError(ValidationError):
    """Query cannot be empty or whitespace only."""

    error_code = "FIT_VAL_002"


class QueryTooLongError(ValidationError):
    """Query exceeds maximum allowed length."""

    error_code = "FIT_VAL_003"
