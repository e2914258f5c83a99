"""Google Gemini API client for LLM inference using the google-genai SDK."""

import logging
import time
from typing import TYPE_CHECKING

from ..common.exceptions import (
    LLMConnectionError,
    LLMGenerationError,
    LLMRateLimitError,
    LLMTimeoutError,
    MissingAPIKeyError,
)
from ..common.utils import normalize_text

if TYPE_CHECKING:
    from google import genai

logger = logging.getLogger(__name__)

_RATE_LIMIT_MARKERS = ("429", "quota", "rate limit", "resource_exhausted", "resource exhausted")
_TIMEOUT_MARKERS = ("timeout", "timed out", "deadline")


def _is_rate_limit(error: Exception) -> bool:
    if getattr(error, "code", None) == 429:
        return True
    message = str(error).lower()
    return any(marker in message for marker in _RATE_LIMIT_MARKERS)


def _is_timeout(error: Exception) -> bool:
    if isinstance(error, TimeoutError) or getattr(error, "code", None) == 504:
        return True
    message = f"{type(error).__name__} {error}".lower()
    return any(marker in message for marker in _TIMEOUT_MARKERS)


class GeminiClient:
    """Client for Google Gemini API using the google-genai SDK."""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash") -> None:
        """Initialize the Gemini client.

        Args:
            api_key: Google AI API key.
            model: Model to use (default: gemini-2.0-flash for free tier).
        """
        self.api_key = api_key
        self.model_name = model
        self._client: "genai.Client | None" = None

    def _get_client(self) -> "genai.Client":
        """Lazy load the Gemini client."""
        if self._client is None:
            if not self.api_key:
                raise MissingAPIKeyError(
                    "Google API key not set. Get one at https://aistudio.google.com/ "
                    "and set GOOGLE_API_KEY in your .env file."
                )

            from google import genai

            self._client = genai.Client(api_key=self.api_key)
            logger.info("Gemini client initialized for model: %s", self.model_name)

        return self._client

    def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.1,
        max_tokens: int = 300,
        timeout: float | None = None,
        max_retries: int = 3,
    ) -> str:
        """Generate a response from the LLM.

        Args:
            prompt: User prompt carrying the context and question.
            system_prompt: Optional system instruction.
            temperature: Sampling temperature (0.0-1.0).
            max_tokens: Maximum tokens to generate.
            timeout: Optional per-call deadline in seconds.
            max_retries: Maximum attempts when rate limited.

        Returns:
            Generated text response.

        Raises:
            MissingAPIKeyError: No API key is configured.
            LLMRateLimitError: Still rate limited after ``max_retries`` attempts.
            LLMTimeoutError: The call exceeded ``timeout``.
            LLMGenerationError: The model returned no usable text.
            LLMConnectionError: Any other provider failure.
        """
        from google.genai.types import GenerateContentConfig, HttpOptions

        client = self._get_client()

        config = GenerateContentConfig(
            system_instruction=normalize_text(system_prompt) or None,
            temperature=temperature,
            max_output_tokens=max_tokens,
            http_options=HttpOptions(timeout=int(timeout * 1000)) if timeout else None,
        )
        contents = normalize_text(prompt)

        for attempt in range(max_retries):
            try:
                response = client.models.generate_content(
                    model=self.model_name,
                    contents=contents,
                    config=config,
                )
            except Exception as e:
                if _is_rate_limit(e):
                    if attempt < max_retries - 1:
                        wait_time = 2**attempt
                        logger.warning("Rate limit hit, retrying in %ds", wait_time)
                        time.sleep(wait_time)
                        continue
                    raise LLMRateLimitError(
                        "Rate limit reached. Please wait a moment and try again.",
                        cause=e,
                        context={"model": self.model_name, "attempts": max_retries},
                    ) from e
                if _is_timeout(e):
                    raise LLMTimeoutError(
                        "LLM call timed out",
                        cause=e,
                        context={"model": self.model_name, "timeout": timeout},
                    ) from e
                raise LLMConnectionError(
                    f"Gemini request failed: {e}",
                    cause=e,
                    context={"model": self.model_name},
                ) from e

            # Safety filters drop all candidates
            if not response.candidates:
                raise LLMGenerationError(
                    "The model returned no candidates", context={"model": self.model_name}
                )

            text = normalize_text(response.text)
            if not text:
                raise LLMGenerationError(
                    "The model returned an empty response", context={"model": self.model_name}
                )
            return text

        raise LLMRateLimitError(
            "Rate limit reached. Please wait a moment and try again.",
            context={"model": self.model_name, "attempts": max_retries},
        )
