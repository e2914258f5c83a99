"""Embeddings and the persistent similarity index."""

from .embeddings import GeminiEmbeddingFunction
from .knowledge_index import KnowledgeIndex

__all__ = ["GeminiEmbeddingFunction", "KnowledgeIndex"]
