"""Knowledge base management endpoints."""

import logging

from fastapi import APIRouter

from ..deps import get_knowledge_base
from ..models import KnowledgeUpdateResponse, RebuildRequest, SourcesRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/knowledge", tags=["knowledge"])


@router.post("/rebuild", response_model=KnowledgeUpdateResponse)
def rebuild_knowledge_base(request: RebuildRequest | None = None) -> KnowledgeUpdateResponse:
    """Delete the store and crawl a fresh one (blocks until done)."""
    urls = [str(url) for url in request.urls] if request and request.urls else None
    logger.info("Rebuild requested (%s)", "custom URLs" if urls else "default sources")

    count = get_knowledge_base().rebuild(urls)
    return KnowledgeUpdateResponse(
        status="ok",
        documents=count,
        message=f"Knowledge base rebuilt with {count} documents",
    )


@router.post("/sources", response_model=KnowledgeUpdateResponse)
def add_sources(request: SourcesRequest) -> KnowledgeUpdateResponse:
    """Crawl new article URLs and fold them into the knowledge base."""
    urls = [str(url) for url in request.urls]
    added = get_knowledge_base().add_sources(urls)

    if not added:
        return KnowledgeUpdateResponse(
            status="unchanged",
            documents=0,
            message="No new relevant fitness content found",
        )
    return KnowledgeUpdateResponse(
        status="ok",
        documents=added,
        message=f"Added {added} new articles to the knowledge base",
    )
