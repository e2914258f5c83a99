"""Language model clients."""

from .gemini_client import GeminiClient

__all__ = ["GeminiClient"]
