"""Composition root wiring the crawler, index and answerer together."""

from __future__ import annotations

import logging
from functools import lru_cache

from ..agent.knowledge_base import KnowledgeBaseConfig, KnowledgeBaseManager
from ..agent.rag_chain import WorkoutRAGChain
from ..config import Settings, settings
from ..data.relevance import RelevanceFilter
from ..data.sources import DEFAULT_SOURCES
from ..data.web_fetcher import WebFetcher
from ..llm.gemini_client import GeminiClient
from ..rag.embeddings import GeminiEmbeddingFunction
from ..rag.knowledge_index import KnowledgeIndex

logger = logging.getLogger(__name__)


def build_knowledge_base(config: Settings) -> KnowledgeBaseManager:
    """Assemble a :class:`KnowledgeBaseManager` from settings."""
    kb_config = KnowledgeBaseConfig(
        vector_store_path=config.vector_store_dir,
        max_urls_per_batch=config.fetch_batch_size,
        min_content_length=config.min_content_length,
        min_keyword_matches=config.min_keyword_matches,
        batch_delay_ms=config.fetch_batch_delay_ms,
    )

    fetcher = WebFetcher(
        timeout=config.fetch_timeout_seconds,
        max_redirects=config.fetch_max_redirects,
        batch_size=kb_config.max_urls_per_batch,
        batch_delay_ms=kb_config.batch_delay_ms,
    )
    relevance_filter = RelevanceFilter(
        min_keyword_matches=kb_config.min_keyword_matches,
        min_content_length=kb_config.min_content_length,
    )
    embeddings = GeminiEmbeddingFunction(
        api_key=config.google_api_key, model_name=config.embedding_model
    )
    index = KnowledgeIndex(kb_config.vector_store_path, embeddings)
    answerer = WorkoutRAGChain(
        index,
        GeminiClient(api_key=config.google_api_key, model=config.llm_model),
        temperature=config.llm_temperature,
        max_output_tokens=config.llm_max_output_tokens,
        snippet_chars=config.context_snippet_chars,
        timeout=config.llm_timeout_seconds,
        default_k=config.default_top_k,
    )
    return KnowledgeBaseManager(
        fetcher, relevance_filter, index, answerer, kb_config, default_sources=DEFAULT_SOURCES
    )


@lru_cache
def get_knowledge_base() -> KnowledgeBaseManager:
    logger.info("Initializing KnowledgeBaseManager (composition root)...")
    return build_knowledge_base(settings)
