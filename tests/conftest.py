"""
Pytest configuration and shared fixtures.
"""

import re
import zlib

import numpy as np
import pytest

from fitness_rag.domain.models import DocumentMetadata, IndexedRecord, RawDocument

EMBEDDING_DIM = 64
_TOKEN = re.compile(r"[a-z0-9]+")


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (HTTP boundary)")
    config.addinivalue_line("markers", "slow: Slow tests (network, large data)")


class FakeEmbeddings:
    """Deterministic bag-of-words embedder: shared words mean similar vectors."""

    def __init__(self, dim: int = EMBEDDING_DIM) -> None:
        self.dim = dim
        self.document_calls = 0
        self.query_calls = 0

    def _vector(self, text: str) -> list[float]:
        vector = np.zeros(self.dim, dtype="float32")
        for token in _TOKEN.findall(text.lower()):
            vector[zlib.crc32(token.encode()) % self.dim] += 1.0
        return vector.tolist()

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls += 1
        return [self._vector(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        self.query_calls += 1
        return self._vector(text)


@pytest.fixture
def fake_embeddings():
    return FakeEmbeddings()


@pytest.fixture
def fitness_text():
    """Article body long enough to pass the content length check."""
    return (
        "A good beginner workout routine builds strength with compound exercises. "
        "Start every training session with five minutes of cardio to warm up, then "
        "move to squats, push-ups and rows. Keep your form strict: brace your core, "
        "keep a neutral spine and control each rep. Three sets of ten reps is a solid "
        "program for the first month. Rest at least one day between sessions so the "
        "muscle can recover, and eat enough protein to support recovery. "
    ) * 2


@pytest.fixture
def make_document(fitness_text):
    """Factory for RawDocument instances with sensible defaults."""

    def _make(
        url: str = "https://example.com/workout",
        title: str = "Beginner Workout Plan",
        content: str | None = None,
        description: str | None = "A simple plan to get started",
        tags: tuple[str, ...] = ("fitness", "beginner"),
    ) -> RawDocument:
        return RawDocument(
            url=url,
            title=title,
            content=fitness_text if content is None else content,
            metadata=DocumentMetadata(description=description, tags=tags),
        )

    return _make


@pytest.fixture
def sample_records(make_document):
    """Three records on clearly different topics."""
    docs = [
        make_document(
            url="https://example.com/squat",
            title="Squat Technique",
            content="squat depth knees hips barbell squat form squat " * 20,
        ),
        make_document(
            url="https://example.com/protein",
            title="Protein and Nutrition",
            content="protein diet nutrition meals recovery calories " * 20,
        ),
        make_document(
            url="https://example.com/yoga",
            title="Yoga for Beginners",
            content="yoga poses breathing flexibility stretch mat " * 20,
        ),
    ]
    return [IndexedRecord.from_document(doc) for doc in docs]


@pytest.fixture
def sample_html():
    """A realistic article page with chrome, metadata and a main section."""
    return """
    <html>
      <head>
        <title>  Beginner Workout Plan  </title>
        <meta name="description" content="A four week plan for new lifters">
        <meta name="author" content="Jane Coach">
        <meta property="article:published_time" content="2024-01-15">
        <meta name="keywords" content="workout, beginner, strength, workout">
        <script>var tracking = true;</script>
      </head>
      <body>
        <nav>Home | Workouts | Nutrition</nav>
        <header><h1>Site Banner</h1></header>
        <main>
          <h2>Week one</h2>
          <p>Start   with three full-body   sessions.</p>
          <p>Focus on squat and push-up form.</p>
          <div class="advertisement">Buy supplements now</div>
        </main>
        <aside>Related posts</aside>
        <footer>Copyright</footer>
      </body>
    </html>
    """
