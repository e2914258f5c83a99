"""Tests for environment-driven settings."""

import pytest

from fitness_rag.config.settings import Settings

pytestmark = pytest.mark.unit


def test_api_key_is_sanitized():
    settings = Settings(google_api_key="\ufeff  secret-key \n")

    assert settings.google_api_key == "secret-key"


def test_defaults(monkeypatch):
    for name in ("LLM_TEMPERATURE", "FETCH_BATCH_SIZE", "MIN_CONTENT_LENGTH", "DEFAULT_TOP_K"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.llm_temperature == 0.1
    assert settings.llm_max_output_tokens == 300
    assert settings.fetch_batch_size == 3
    assert settings.fetch_batch_delay_ms == 1000
    assert settings.min_content_length == 500
    assert settings.min_keyword_matches == 2
    assert settings.context_snippet_chars == 400
    assert settings.default_top_k == 4


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FETCH_BATCH_SIZE", "5")
    monkeypatch.setenv("INITIALIZE_ON_STARTUP", "false")

    settings = Settings(_env_file=None)

    assert settings.fetch_batch_size == 5
    assert settings.initialize_on_startup is False


def test_ensure_directories(tmp_path):
    settings = Settings(_env_file=None, data_dir=tmp_path / "data", vector_store_dir=tmp_path / "data" / "vs")

    settings.ensure_directories()

    assert (tmp_path / "data" / "vs").is_dir()
