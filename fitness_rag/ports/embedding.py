"""Embedding port abstraction."""

from __future__ import annotations

from typing import Protocol


class EmbeddingPort(Protocol):
    """Abstract interface for turning text into dense vectors."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:  # pragma: no cover - protocol
        ...

    def embed_query(self, text: str) -> list[float]:  # pragma: no cover - protocol
        ...
