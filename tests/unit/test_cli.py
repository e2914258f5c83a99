"""Tests for the typer CLI."""

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from fitness_rag.common.exceptions import EmptyCorpusError
from fitness_rag.config import settings
from fitness_rag.domain.models import InitializationResult, QueryType, RAGResponse, SourceReference
from fitness_rag.interface.cli import app

pytestmark = pytest.mark.unit

runner = CliRunner()


@pytest.fixture(autouse=True)
def configured(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "google_api_key", "test-key")
    monkeypatch.setattr(settings, "data_dir", tmp_path / "data")
    monkeypatch.setattr(settings, "vector_store_dir", tmp_path / "data" / "vectorstore")


@pytest.fixture
def manager():
    mock = MagicMock()
    mock.initialize.return_value = InitializationResult(True, "Knowledge base loaded from existing data")
    mock.answer.return_value = RAGResponse(
        answer="Brace your core.",
        sources=[SourceReference(url="https://example.com/dl", title="Deadlift Form", relevance_score=0.8)],
        context="...",
    )
    with patch("fitness_rag.interface.cli.get_knowledge_base", return_value=mock):
        yield mock


def test_init_reports_success(manager):
    result = runner.invoke(app, ["init"])

    assert result.exit_code == 0
    assert "loaded from existing data" in result.output


def test_init_failure_exits_non_zero(manager):
    manager.initialize.return_value = InitializationResult(False, "Failed to initialize knowledge base")

    result = runner.invoke(app, ["init"])

    assert result.exit_code == 1


def test_ask_with_type(manager):
    result = runner.invoke(app, ["ask", "deadlift", "--type", "form"])

    assert result.exit_code == 0
    manager.answer.assert_called_once_with("deadlift", QueryType.FORM)
    assert "Brace your core." in result.output
    assert "Deadlift Form" in result.output


def test_missing_api_key_exits(manager, monkeypatch):
    monkeypatch.setattr(settings, "google_api_key", "")

    result = runner.invoke(app, ["ask", "squat"])

    assert result.exit_code == 1
    manager.initialize.assert_not_called()


def test_rebuild_failure_exits(manager):
    manager.rebuild.side_effect = EmptyCorpusError("No relevant fitness content found")

    result = runner.invoke(app, ["rebuild", "--url", "https://example.com/a"])

    assert result.exit_code == 1
    manager.rebuild.assert_called_once_with(["https://example.com/a"])


def test_add_sources(manager):
    manager.add_sources.return_value = 1

    result = runner.invoke(app, ["add-sources", "https://example.com/a"])

    assert result.exit_code == 0
    assert "Added 1 new articles" in result.output
