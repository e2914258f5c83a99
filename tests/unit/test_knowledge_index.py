"""Tests for the FAISS-backed knowledge index, using a real index on disk."""

import json

import pytest

from fitness_rag.common.exceptions import EmptyCorpusError, NotInitializedError
from fitness_rag.rag.knowledge_index import DOCSTORE_FILE, INDEX_FILE, KnowledgeIndex

pytestmark = pytest.mark.unit


@pytest.fixture
def index(tmp_path, fake_embeddings):
    return KnowledgeIndex(tmp_path / "vectorstore", fake_embeddings)


class TestBuild:
    def test_empty_records_raise(self, index):
        with pytest.raises(EmptyCorpusError):
            index.build([])
        assert not index.exists()
        assert not index.is_loaded

    def test_build_persists_both_artifacts(self, index, sample_records):
        count = index.build(sample_records)

        assert count == 3
        assert (index.store_path / INDEX_FILE).is_file()
        assert (index.store_path / DOCSTORE_FILE).is_file()
        assert index.exists()
        assert index.is_loaded
        assert index.records == tuple(sample_records)

    def test_docstore_keeps_row_order_and_metadata(self, index, sample_records):
        index.build(sample_records)

        data = json.loads((index.store_path / DOCSTORE_FILE).read_text(encoding="utf-8"))

        assert data["dim"] == 64
        assert [item["metadata"]["url"] for item in data["records"]] == [
            record.metadata.url for record in sample_records
        ]
        assert data["records"][0]["metadata"]["origin"] == "web"
        assert data["records"][0]["metadata"]["tags"] == ["fitness", "beginner"]

    def test_embeds_all_records_in_one_call(self, index, sample_records, fake_embeddings):
        index.build(sample_records)

        assert fake_embeddings.document_calls == 1


class TestSearch:
    def test_search_before_build_raises(self, index):
        with pytest.raises(NotInitializedError):
            index.search("squat", 3)

    def test_most_similar_record_ranks_first(self, index, sample_records):
        index.build(sample_records)

        hits = index.search("how deep should my squat be", 3)

        assert hits[0].record.metadata.title == "Squat Technique"

    @pytest.mark.parametrize("k", [1, 2, 3, 10])
    def test_result_count_bounded_and_sorted(self, index, sample_records, k):
        index.build(sample_records)

        hits = index.search("protein nutrition for recovery", k)

        assert len(hits) == min(k, len(sample_records))
        scores = [hit.score for hit in hits]
        assert scores == sorted(scores, reverse=True)
        assert all(-1.0 - 1e-5 <= score <= 1.0 + 1e-5 for score in scores)

    @pytest.mark.parametrize("k", [0, -1])
    def test_non_positive_k_returns_nothing(self, index, sample_records, k):
        index.build(sample_records)

        assert index.search("yoga", k) == []

    def test_identical_text_scores_close_to_one(self, index, sample_records):
        index.build(sample_records)

        hits = index.search(sample_records[2].text, 1)

        assert hits[0].record == sample_records[2]
        assert hits[0].score == pytest.approx(1.0, abs=1e-4)


class TestPersistence:
    def test_round_trip_load(self, tmp_path, fake_embeddings, sample_records):
        store = tmp_path / "vectorstore"
        KnowledgeIndex(store, fake_embeddings).build(sample_records)

        reloaded = KnowledgeIndex(store, fake_embeddings)

        assert reloaded.load() is True
        assert reloaded.records == tuple(sample_records)
        assert reloaded.search("yoga breathing", 1)[0].record.metadata.title == "Yoga for Beginners"

    def test_reloaded_search_matches_original_ranking(self, tmp_path, fake_embeddings, sample_records):
        store = tmp_path / "vectorstore"
        original = KnowledgeIndex(store, fake_embeddings)
        original.build(sample_records)
        before = original.search("protein after squat training", 3)

        reloaded = KnowledgeIndex(store, fake_embeddings)
        assert reloaded.load() is True
        after = reloaded.search("protein after squat training", 3)

        assert [hit.record for hit in after] == [hit.record for hit in before]
        assert [hit.score for hit in after] == pytest.approx([hit.score for hit in before])

    def test_load_missing_store_returns_false(self, index):
        assert index.load() is False
        assert not index.is_loaded

    @pytest.mark.parametrize("artifact", [INDEX_FILE, DOCSTORE_FILE])
    def test_load_with_one_artifact_missing_returns_false(
        self, tmp_path, fake_embeddings, sample_records, artifact
    ):
        store = tmp_path / "vectorstore"
        KnowledgeIndex(store, fake_embeddings).build(sample_records)
        (store / artifact).unlink()

        reloaded = KnowledgeIndex(store, fake_embeddings)

        assert reloaded.exists() is False
        assert reloaded.load() is False

    def test_load_corrupt_docstore_returns_false(self, tmp_path, fake_embeddings, sample_records):
        store = tmp_path / "vectorstore"
        KnowledgeIndex(store, fake_embeddings).build(sample_records)
        (store / DOCSTORE_FILE).write_text("{not json", encoding="utf-8")

        assert KnowledgeIndex(store, fake_embeddings).load() is False

    def test_delete_then_load_returns_false(self, index, sample_records):
        index.build(sample_records)

        index.delete()

        assert not index.is_loaded
        assert not index.exists()
        assert index.load() is False

    def test_delete_is_idempotent(self, index):
        index.delete()
        index.delete()

        assert not index.exists()

    def test_info_reflects_state(self, index, sample_records):
        before = index.info()
        index.build(sample_records)
        after = index.info()

        assert before.is_loaded is False
        assert before.document_count == 0
        assert before.exists_on_disk is False
        assert after.to_dict() == {
            "is_loaded": True,
            "store_path": str(index.store_path),
            "document_count": 3,
            "exists_on_disk": True,
        }
