"""LLM port abstraction."""

from __future__ import annotations

from typing import Protocol


class LLMPort(Protocol):
    """Abstract interface for text generation."""

    def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.1,
        max_tokens: int = 300,
        timeout: float | None = None,
    ) -> str:  # pragma: no cover - protocol
        ...
