"""Question answering and knowledge base lifecycle."""

from .knowledge_base import KnowledgeBaseConfig, KnowledgeBaseManager
from .rag_chain import WorkoutRAGChain

__all__ = ["KnowledgeBaseConfig", "KnowledgeBaseManager", "WorkoutRAGChain"]
