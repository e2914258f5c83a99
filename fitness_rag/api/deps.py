import logging
from functools import lru_cache

from ..agent.knowledge_base import KnowledgeBaseManager
from ..composition.container import get_knowledge_base as _get_knowledge_base

logger = logging.getLogger(__name__)


@lru_cache
def get_knowledge_base() -> KnowledgeBaseManager:
    logger.info("Delegating to composition root for knowledge base...")
    return _get_knowledge_base()
