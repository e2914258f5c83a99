"""Protocols for the pluggable boundaries: embeddings and the language model."""

from .embedding import EmbeddingPort
from .llm import LLMPort

__all__ = ["EmbeddingPort", "LLMPort"]
