"""Persistent FAISS similarity index over fitness article records.

The store is a directory holding two artifacts:

* ``faiss.index``: the inner-product index over L2-normalised vectors.
* ``docstore.json``: the ordered records and the embedding dimension.

Row *i* of the index is record *i* of the docstore. A store is only valid
when both files exist and can be read.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

import faiss
import numpy as np

from ..common.exceptions import (
    EmptyCorpusError,
    IndexPersistenceError,
    NotInitializedError,
    VectorStoreError,
)
from ..domain.models import IndexedRecord, IndexInfo, RecordMetadata, ScoredRecord
from ..ports.embedding import EmbeddingPort

logger = logging.getLogger(__name__)

INDEX_FILE = "faiss.index"
DOCSTORE_FILE = "docstore.json"


def normalize_vectors(vectors: Any) -> np.ndarray:
    """Return float32 row vectors scaled to unit length.

    Zero vectors are left as zeros so they score 0 against everything.
    """
    matrix = np.asarray(vectors, dtype="float32")
    if matrix.ndim == 1:
        matrix = matrix.reshape(1, -1)
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    return np.ascontiguousarray(matrix / norms, dtype="float32")


class KnowledgeIndex:
    """Cosine-similarity index with on-disk persistence.

    Scores are cosine similarities in [-1, 1]; higher means more similar.
    """

    def __init__(self, store_path: Path | str, embeddings: EmbeddingPort) -> None:
        """Initialize an empty, unloaded index.

        Args:
            store_path: Directory holding the persisted artifacts.
            embeddings: Embedder used for both records and queries.
        """
        self.store_path = Path(store_path)
        self.embeddings = embeddings
        self._lock = threading.RLock()
        self._index: faiss.Index | None = None
        self._records: tuple[IndexedRecord, ...] = ()

    @property
    def index_path(self) -> Path:
        return self.store_path / INDEX_FILE

    @property
    def docstore_path(self) -> Path:
        return self.store_path / DOCSTORE_FILE

    @property
    def is_loaded(self) -> bool:
        return self._index is not None

    @property
    def records(self) -> tuple[IndexedRecord, ...]:
        return self._records

    def exists(self) -> bool:
        """Check whether both persisted artifacts are present."""
        return self.index_path.is_file() and self.docstore_path.is_file()

    def build(self, records: list[IndexedRecord]) -> int:
        """Embed ``records``, build the index and persist it.

        The in-memory index is only replaced once both artifacts are written.

        Args:
            records: Records to index, in row order.

        Returns:
            Number of records indexed.

        Raises:
            EmptyCorpusError: ``records`` is empty.
            IndexPersistenceError: The artifacts could not be written.
        """
        if not records:
            raise EmptyCorpusError(
                "No documents to index", context={"store_path": str(self.store_path)}
            )

        with self._lock:
            logger.info("Building index from %d records", len(records))
            vectors = normalize_vectors(
                self.embeddings.embed_documents([record.text for record in records])
            )
            if vectors.shape[0] != len(records):
                raise VectorStoreError(
                    "Embedding count does not match record count",
                    context={"records": len(records), "embeddings": vectors.shape[0]},
                )

            index = faiss.IndexFlatIP(vectors.shape[1])
            index.add(vectors)

            frozen = tuple(records)
            self._save(index, frozen)
            self._index = index
            self._records = frozen

            logger.info("Index saved to %s", self.store_path)
            return len(frozen)

    def _save(self, index: faiss.Index, records: tuple[IndexedRecord, ...]) -> None:
        docstore = {
            "dim": index.d,
            "records": [
                {"text": record.text, "metadata": record.metadata.to_dict()} for record in records
            ],
        }
        tmp_index = self.store_path / f"{INDEX_FILE}.tmp"
        tmp_docstore = self.store_path / f"{DOCSTORE_FILE}.tmp"

        try:
            self.store_path.mkdir(parents=True, exist_ok=True)
            faiss.write_index(index, str(tmp_index))
            with open(tmp_docstore, "w", encoding="utf-8") as f:
                json.dump(docstore, f, ensure_ascii=False)
            os.replace(tmp_index, self.index_path)
            os.replace(tmp_docstore, self.docstore_path)
        except (OSError, RuntimeError) as e:
            raise IndexPersistenceError(
                "Failed to write index artifacts",
                cause=e,
                context={"store_path": str(self.store_path)},
            ) from e

    def load(self) -> bool:
        """Load a previously persisted store into memory.

        Returns:
            ``True`` when loaded, ``False`` when the store is missing or unreadable.
        """
        with self._lock:
            if not self.exists():
                logger.info("No index found at %s", self.store_path)
                return False

            try:
                index = faiss.read_index(str(self.index_path))
                with open(self.docstore_path, encoding="utf-8") as f:
                    docstore = json.load(f)
                records = tuple(
                    IndexedRecord(
                        text=item["text"],
                        metadata=RecordMetadata.from_dict(item["metadata"]),
                    )
                    for item in docstore["records"]
                )
            except (OSError, RuntimeError, ValueError, KeyError, TypeError) as e:
                logger.warning("Index at %s is unreadable: %s", self.store_path, e)
                return False

            if index.ntotal != len(records) or index.d != docstore.get("dim", index.d):
                logger.warning(
                    "Index at %s is inconsistent (%d vectors, %d records)",
                    self.store_path,
                    index.ntotal,
                    len(records),
                )
                return False

            self._index = index
            self._records = records
            logger.info("Loaded index with %d records from %s", len(records), self.store_path)
            return True

    def search(self, query: str, k: int) -> list[ScoredRecord]:
        """Return at most ``k`` records most similar to ``query``.

        Raises:
            NotInitializedError: Nothing has been built or loaded yet.
        """
        with self._lock:
            index = self._index
            records = self._records

        if index is None:
            raise NotInitializedError(
                "Knowledge index is not loaded", context={"store_path": str(self.store_path)}
            )
        if k <= 0 or not records:
            return []

        query_vector = normalize_vectors(self.embeddings.embed_query(query))
        scores, rows = index.search(query_vector, min(k, len(records)))

        hits: list[ScoredRecord] = []
        for score, row in zip(scores[0], rows[0], strict=True):
            if row < 0:
                continue
            hits.append(ScoredRecord(record=records[row], score=float(score)))
        return hits

    def delete(self) -> None:
        """Remove the persisted artifacts and clear memory. Safe to repeat."""
        with self._lock:
            self._index = None
            self._records = ()
            try:
                for path in (self.index_path, self.docstore_path):
                    path.unlink(missing_ok=True)
            except OSError as e:
                raise IndexPersistenceError(
                    "Failed to delete index artifacts",
                    cause=e,
                    context={"store_path": str(self.store_path)},
                ) from e
            logger.info("Deleted index at %s", self.store_path)

    def info(self) -> IndexInfo:
        return IndexInfo(
            is_loaded=self.is_loaded,
            store_path=str(self.store_path),
            document_count=len(self._records),
            exists_on_disk=self.exists(),
        )
