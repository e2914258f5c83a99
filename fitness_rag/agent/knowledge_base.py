"""Knowledge base lifecycle: crawl, filter, index and answer.

The manager owns the rebuild lock. Every lifecycle operation (initialize,
create, add, rebuild) holds it from the first fetch to the final index swap,
so two of them can never interleave on the same store. Queries do not take
the lock; they read whichever index is currently swapped in.
"""

import logging
import threading
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from ..common.exception_handler import log_exception
from ..common.exceptions import EmptyCorpusError, NotInitializedError
from ..data.relevance import RelevanceFilter
from ..data.sources import DEFAULT_SOURCES
from ..data.web_fetcher import WebFetcher
from ..domain.models import (
    IndexedRecord,
    InitializationResult,
    KnowledgeBaseState,
    QueryType,
    RAGResponse,
    RawDocument,
)
from ..rag.knowledge_index import KnowledgeIndex
from .rag_chain import WorkoutRAGChain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KnowledgeBaseConfig:
    """Tunables reported by ``status()`` and used when crawling."""

    vector_store_path: Path
    max_urls_per_batch: int = 3
    min_content_length: int = 500
    min_keyword_matches: int = 2
    batch_delay_ms: int = 1000

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["vector_store_path"] = str(self.vector_store_path)
        return data


class KnowledgeBaseManager:
    """Builds, loads and queries the fitness knowledge base."""

    def __init__(
        self,
        fetcher: WebFetcher,
        relevance_filter: RelevanceFilter,
        index: KnowledgeIndex,
        answerer: WorkoutRAGChain,
        config: KnowledgeBaseConfig,
        default_sources: Iterable[str] = DEFAULT_SOURCES,
    ) -> None:
        self.fetcher = fetcher
        self.relevance_filter = relevance_filter
        self.index = index
        self.answerer = answerer
        self.config = config
        self._default_sources = list(default_sources)
        self._lock = threading.RLock()
        self._state = KnowledgeBaseState.UNINITIALIZED

    @property
    def state(self) -> KnowledgeBaseState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is KnowledgeBaseState.READY and self.index.is_loaded

    @property
    def default_sources(self) -> list[str]:
        return list(self._default_sources)

    def add_default_sources(self, urls: Iterable[str]) -> None:
        """Extend the built-in source list used by later builds."""
        with self._lock:
            for url in urls:
                if url not in self._default_sources:
                    self._default_sources.append(url)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> InitializationResult:
        """Load the persisted store, or crawl the default sources into a new one.

        Never raises: every failure is logged and reported in the result.
        """
        with self._lock:
            logger.info("Initializing knowledge base...")
            try:
                if self.index.load():
                    self._mark(KnowledgeBaseState.LOADED)
                    logger.info("Knowledge base loaded from existing data")
                    return InitializationResult(True, "Knowledge base loaded from existing data")

                logger.info("No existing knowledge base found. Creating new one...")
                count = self.create_knowledge_base()
            except Exception as e:  # noqa: BLE001
                log_exception(e, logger, extra_context={"operation": "initialize"})
                self._state = KnowledgeBaseState.UNINITIALIZED
                return InitializationResult(False, f"Failed to initialize knowledge base: {e}")

            return InitializationResult(
                True, f"Knowledge base initialized with {count} new documents"
            )

    def create_knowledge_base(self, urls: Sequence[str] | None = None) -> int:
        """Crawl ``urls`` (default sources when omitted), filter and index them.

        Returns:
            Number of documents indexed.

        Raises:
            EmptyCorpusError: No page passed the relevance filter.
        """
        with self._lock:
            targets = list(urls) if urls is not None else self.default_sources
            accepted = self._collect(targets)
            if not accepted:
                raise EmptyCorpusError(
                    "No relevant fitness content found. Check the URLs or try different sources.",
                    context={"urls": len(targets)},
                )
            return self._build(accepted)

    def add_sources(self, urls: Sequence[str]) -> int:
        """Add new pages by rebuilding from the default sources plus ``urls``.

        Returns:
            Number of new documents accepted; ``0`` when none passed the filter,
            in which case the store is left untouched.
        """
        with self._lock:
            logger.info("Adding %d new URLs to knowledge base", len(urls))
            new_docs = self._collect(urls)
            if not new_docs:
                logger.info("No new relevant fitness content found")
                return 0

            new_urls = {doc.url for doc in new_docs}
            defaults = [url for url in self.default_sources if url not in new_urls]
            merged: dict[str, RawDocument] = {doc.url: doc for doc in self._collect(defaults)}
            for doc in new_docs:
                merged.setdefault(doc.url, doc)

            logger.info("Recreating knowledge base with %d documents", len(merged))
            self._build(list(merged.values()))
            logger.info("Added %d new articles to knowledge base", len(new_docs))
            return len(new_docs)

    def rebuild(self, custom_urls: Sequence[str] | None = None) -> int:
        """Delete the persisted store and build a fresh one."""
        with self._lock:
            logger.info("Rebuilding knowledge base...")
            self.index.delete()
            self._state = KnowledgeBaseState.UNINITIALIZED
            count = self.create_knowledge_base(custom_urls)
            logger.info("Knowledge base rebuilt with %d documents", count)
            return count

    def _collect(self, urls: Sequence[str]) -> list[RawDocument]:
        if not urls:
            return []
        documents = self.fetcher.fetch_many(urls)
        accepted = self.relevance_filter.filter(documents)
        logger.info(
            "Found %d relevant fitness articles out of %d fetched", len(accepted), len(documents)
        )
        return accepted

    def _build(self, documents: list[RawDocument]) -> int:
        count = self.index.build([IndexedRecord.from_document(doc) for doc in documents])
        self._mark(KnowledgeBaseState.BUILT)
        return count

    def _mark(self, state: KnowledgeBaseState) -> None:
        self._state = state
        if self.index.is_loaded:
            self._state = KnowledgeBaseState.READY

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    def _require_ready(self) -> None:
        if not self.is_ready:
            raise NotInitializedError(
                "Knowledge base not initialized. Call initialize() first.",
                context={"state": self._state.value},
            )

    def answer(
        self,
        question: str,
        query_type: QueryType = QueryType.GENERAL,
        timeout: float | None = None,
    ) -> RAGResponse:
        """Answer ``question`` using the retrieval profile for ``query_type``."""
        self._require_ready()
        return self.answerer.answer_query(question, query_type, timeout=timeout)

    def ask(self, question: str, timeout: float | None = None) -> RAGResponse:
        self._require_ready()
        return self.answerer.answer(question, timeout=timeout)

    def workout_suggestions(self, query: str, timeout: float | None = None) -> RAGResponse:
        self._require_ready()
        return self.answerer.workout_suggestions(query, timeout=timeout)

    def exercise_form(self, exercise_name: str, timeout: float | None = None) -> RAGResponse:
        self._require_ready()
        return self.answerer.exercise_form(exercise_name, timeout=timeout)

    def nutrition_advice(self, query: str, timeout: float | None = None) -> RAGResponse:
        self._require_ready()
        return self.answerer.nutrition_advice(query, timeout=timeout)

    def status(self) -> dict[str, Any]:
        """Snapshot of readiness, lifecycle state, index and configuration."""
        return {
            "is_ready": self.is_ready,
            "state": self._state.value,
            "index_info": self.index.info().to_dict(),
            "config": self.config.to_dict(),
        }
