"""Gemini embeddings over the ``batchEmbedContents`` REST endpoint."""

import logging
import time

import requests

from ..common.exceptions import EmbeddingAPIError, EmbeddingRateLimitError, MissingAPIKeyError

logger = logging.getLogger(__name__)

API_BASE = "https://generativelanguage.googleapis.com/v1beta"
BATCH_SIZE = 20
MAX_RETRIES = 3
REQUEST_TIMEOUT = 30

TASK_DOCUMENT = "RETRIEVAL_DOCUMENT"
TASK_QUERY = "RETRIEVAL_QUERY"


class GeminiEmbeddingFunction:
    """Embedding function using the Google Gemini API."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "models/text-embedding-004",
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the embedding function.

        Args:
            api_key: Google AI API key.
            model_name: Fully qualified embedding model name.
            session: Optional pre-configured session (used by tests).
        """
        self.api_key = api_key
        self.model_name = model_name
        self.session = session or requests.Session()

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed texts that will be stored in the index."""
        logger.info("Generating embeddings for %d documents", len(texts))
        return self._embed_texts(texts, task_type=TASK_DOCUMENT)

    def embed_query(self, text: str) -> list[float]:
        """Embed a search query."""
        return self._embed_texts([text], task_type=TASK_QUERY)[0]

    def _embed_texts(self, texts: list[str], task_type: str) -> list[list[float]]:
        """Embed ``texts`` in batches, retrying on rate limits.

        Raises:
            MissingAPIKeyError: No API key is configured.
            EmbeddingRateLimitError: Still rate limited after all retries.
            EmbeddingAPIError: The API failed or returned a malformed payload.
        """
        if not self.api_key:
            raise MissingAPIKeyError(
                "Google API key not set. Set GOOGLE_API_KEY in your .env file.",
                context={"model": self.model_name},
            )

        api_url = f"{API_BASE}/{self.model_name}:batchEmbedContents"
        embeddings: list[list[float]] = []

        for start in range(0, len(texts), BATCH_SIZE):
            batch = texts[start : start + BATCH_SIZE]
            payload = {
                "requests": [
                    {
                        "model": self.model_name,
                        "content": {"parts": [{"text": text}]},
                        "taskType": task_type,
                    }
                    for text in batch
                ]
            }
            embeddings.extend(self._post_batch(api_url, payload, len(batch)))

        return embeddings

    def _post_batch(self, api_url: str, payload: dict, expected: int) -> list[list[float]]:
        for attempt in range(MAX_RETRIES):
            try:
                response = self.session.post(
                    api_url,
                    params={"key": self.api_key},
                    json=payload,
                    timeout=REQUEST_TIMEOUT,
                )
            except requests.RequestException as e:
                raise EmbeddingAPIError(
                    "Embedding request failed", cause=e, context={"model": self.model_name}
                ) from e

            if response.status_code == 429:
                if attempt < MAX_RETRIES - 1:
                    wait_time = 2**attempt
                    logger.warning("Rate limit hit (429), retrying in %ds", wait_time)
                    time.sleep(wait_time)
                    continue
                raise EmbeddingRateLimitError(
                    "Embedding rate limit exceeded",
                    context={"model": self.model_name, "attempts": MAX_RETRIES},
                )

            if response.status_code != 200:
                raise EmbeddingAPIError(
                    f"Embedding API returned {response.status_code}",
                    context={"model": self.model_name, "body": response.text[:500]},
                )

            try:
                body = response.json()
            except ValueError as e:
                raise EmbeddingAPIError(
                    "Embedding API returned invalid JSON",
                    cause=e,
                    context={"model": self.model_name, "body": response.text[:500]},
                ) from e

            vectors = [item.get("values") for item in body.get("embeddings", [])]
            if len(vectors) != expected or not all(vectors):
                raise EmbeddingAPIError(
                    "Embedding API returned an incomplete batch",
                    context={"expected": expected, "received": len(vectors)},
                )
            return vectors

        # Unreachable: the last attempt either returns or raises.
        raise EmbeddingRateLimitError("Embedding rate limit exceeded")
