"""Configuration management for the fitness knowledge base."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _sanitize_secret(value: str) -> str:
    """Remove BOM characters and whitespace from secrets.

    Secrets copied from dashboards or mounted by the platform may carry a
    BOM that breaks HTTP headers and query strings.
    """
    if not value:
        return value
    return value.lstrip("\ufeff").strip()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Google AI API (chat model + embeddings)
    google_api_key: str = ""

    @field_validator("google_api_key", mode="after")
    @classmethod
    def sanitize_secrets(cls, value: str) -> str:
        """Remove BOM and whitespace from secret values."""
        return _sanitize_secret(value)

    # Data directories
    data_dir: Path = Path("./data")
    vector_store_dir: Path = Path("./data/vectorstore")

    # Model settings
    llm_model: str = "gemini-2.0-flash"
    embedding_model: str = "models/text-embedding-004"
    llm_temperature: float = 0.1
    llm_max_output_tokens: int = 300
    llm_timeout_seconds: float | None = None

    # Crawling
    fetch_timeout_seconds: float = 10.0
    fetch_max_redirects: int = 5
    fetch_batch_size: int = 3
    fetch_batch_delay_ms: int = 1000

    # Relevance filter
    min_content_length: int = 500
    min_keyword_matches: int = 2

    # RAG settings
    context_snippet_chars: int = 400
    default_top_k: int = 4

    # API
    initialize_on_startup: bool = True

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None
    log_json: bool = False

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.vector_store_dir.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
