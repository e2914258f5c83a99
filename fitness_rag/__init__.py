"""Fitness knowledge base: web crawling, vector indexing and RAG answers."""

__version__ = "1.0.0"
