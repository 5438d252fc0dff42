"""Tests for the hybrid chunk scorer."""

import pytest

from context_engine.core.text import estimate_tokens
from context_engine.rag.scorer import (
    combined_score,
    full_doc_score,
    position_score,
    score_chunks,
    summary_boost,
)
from context_engine.schemas.chunk import ChunkSource, ScoredChunk
from context_engine.schemas.config import HybridContextConfig
from context_engine.tests.fakes import make_chunk

CONFIG = HybridContextConfig(
    vector_weight=0.6, full_doc_weight=0.3, position_weight=0.1, summary_boost=1.5, token_budget=0
)


class TestPositionScore:
    """Test position-based scoring."""

    def test_first_chunk_scores_one(self):
        assert position_score(0, 10) == 1.0

    def test_linear_decrease(self):
        assert position_score(5, 10) == pytest.approx(0.5)
        assert position_score(10, 10) == pytest.approx(0.0)

    def test_unknown_total_assumes_one_hundred(self):
        assert position_score(10, 0) == pytest.approx(0.9)
        assert position_score(10, -3) == pytest.approx(0.9)


class TestFullDocScore:
    """Test the full-document heuristic."""

    def test_base_score(self):
        assert full_doc_score(make_chunk(chunk_number=5)) == pytest.approx(0.5)

    def test_opening_chunks_bonus(self):
        assert full_doc_score(make_chunk(chunk_number=0)) == pytest.approx(0.8)
        assert full_doc_score(make_chunk(chunk_number=2)) == pytest.approx(0.8)
        assert full_doc_score(make_chunk(chunk_number=3)) == pytest.approx(0.5)

    def test_header_and_summary_bonus(self):
        chunk = make_chunk(chunk_number=10, metadata={"is_header": True, "is_summary": True})
        assert full_doc_score(chunk) == pytest.approx(1.0)

    def test_non_boolean_flags_ignored(self):
        """Only real booleans count; missing or odd metadata degrades to the base score."""
        chunk = make_chunk(chunk_number=10, metadata={"is_header": "yes", "is_summary": 1})
        assert full_doc_score(chunk) == pytest.approx(0.5)


class TestSummaryBoost:
    """Test summary boost detection."""

    def test_is_summary_flag(self):
        assert summary_boost(make_chunk(metadata={"is_summary": True}), CONFIG) == 1.5

    @pytest.mark.parametrize("chunk_type", ["summary", "abstract", "introduction"])
    def test_summary_chunk_types(self, chunk_type):
        assert summary_boost(make_chunk(metadata={"chunk_type": chunk_type}), CONFIG) == 1.5

    def test_regular_chunk(self):
        assert summary_boost(make_chunk(metadata={"chunk_type": "body"}), CONFIG) == 1.0
        assert summary_boost(make_chunk(), CONFIG) == 1.0

    def test_disabled_when_summaries_excluded(self):
        config = CONFIG.model_copy(update={"include_summaries": False})
        assert summary_boost(make_chunk(metadata={"is_summary": True}), config) == 1.0


class TestCombinedScore:
    """Test the weighted combination."""

    def test_weighted_sum_times_boost(self):
        scored = ScoredChunk(
            chunk=make_chunk(), vector_score=0.9, full_doc_score=0.8, position_score=0.5, summary_boost=1.5
        )
        expected = (0.9 * 0.6 + 0.8 * 0.3 + 0.5 * 0.1) * 1.5
        assert combined_score(scored, CONFIG) == pytest.approx(expected)


class TestScoreChunks:
    """Test scoring and merging across both sources."""

    def test_empty_inputs(self):
        assert score_chunks([], [], estimate_tokens, CONFIG) == []

    def test_vector_only_chunk(self):
        chunk = make_chunk(chunk_number=1, total_chunks=10, score=0.9)
        [scored] = score_chunks([chunk], [], estimate_tokens, CONFIG)

        assert scored.source == ChunkSource.VECTOR
        assert scored.full_doc_score == 0.0
        assert scored.combined_score == pytest.approx(0.9 * 0.6 + 0.9 * 0.1)
        assert scored.estimated_tokens == estimate_tokens(chunk.content)

    def test_full_doc_only_chunk_ignores_score(self):
        """Scores reported on full-document chunks are not treated as vector similarity."""
        chunk = make_chunk(chunk_number=5, total_chunks=10, score=0.99)
        [scored] = score_chunks([], [chunk], estimate_tokens, CONFIG)

        assert scored.source == ChunkSource.FULL_DOC
        assert scored.vector_score == 0.0
        assert scored.combined_score == pytest.approx(0.5 * 0.3 + 0.5 * 0.1)

    def test_merge_same_key_into_both(self):
        """A chunk present in both sources yields exactly one `both` chunk with summed contributions."""
        vector = make_chunk(chunk_number=1, total_chunks=10, score=0.95, content="vector text")
        full_doc = make_chunk(chunk_number=1, total_chunks=10, content="full doc text")

        scored = score_chunks([vector], [full_doc], estimate_tokens, CONFIG)

        assert len(scored) == 1
        merged = scored[0]
        assert merged.source == ChunkSource.BOTH
        assert merged.vector_score == 0.95
        assert merged.full_doc_score == pytest.approx(0.8)
        assert merged.combined_score == pytest.approx(0.95 * 0.6 + 0.8 * 0.3 + 0.9 * 0.1)

    def test_merge_takes_payload_from_full_doc_occurrence(self):
        vector = make_chunk(chunk_number=4, content="vector text", metadata={})
        full_doc = make_chunk(chunk_number=4, content="full doc text", metadata={"is_summary": True})

        [merged] = score_chunks([vector], [full_doc], estimate_tokens, CONFIG)

        assert merged.chunk.content == "full doc text"
        assert merged.summary_boost == 1.5

    def test_same_chunk_number_in_different_documents_not_merged(self):
        scored = score_chunks([make_chunk("doc1", 1, score=0.5)], [make_chunk("doc2", 1)], estimate_tokens, CONFIG)
        assert {sc.source for sc in scored} == {ChunkSource.VECTOR, ChunkSource.FULL_DOC}

    def test_distinct_explicit_ids_kept_apart(self):
        """Chunks with their own ids and no document id are not collapsed."""
        vector = [make_chunk("", 0, id="a", score=0.7), make_chunk("", 0, id="b", score=0.6)]

        scored = score_chunks(vector, [], estimate_tokens, CONFIG)

        assert sorted(sc.chunk.id for sc in scored) == ["a", "b"]

    def test_explicit_id_merges_across_sources(self):
        vector = make_chunk("doc1", 2, id="chunk-7", score=0.9)
        full_doc = make_chunk("doc1", 2, id="chunk-7")

        [merged] = score_chunks([vector], [full_doc], estimate_tokens, CONFIG)

        assert merged.source == ChunkSource.BOTH

    def test_explicit_id_differs_from_positional_key(self):
        """An id-bearing chunk and an id-less chunk at the same position are different chunks."""
        vector = make_chunk("doc1", 2, id="chunk-7", score=0.9)
        full_doc = make_chunk("doc1", 2)

        scored = score_chunks([vector], [full_doc], estimate_tokens, CONFIG)

        assert {sc.source for sc in scored} == {ChunkSource.VECTOR, ChunkSource.FULL_DOC}

    def test_sorted_by_combined_score_descending(self):
        vector = [make_chunk(chunk_number=i, total_chunks=10, score=s) for i, s in enumerate([0.2, 0.9, 0.5])]
        scored = score_chunks(vector, [], estimate_tokens, CONFIG)
        scores = [sc.combined_score for sc in scored]
        assert scores == sorted(scores, reverse=True)

    def test_deterministic(self):
        """Identical inputs always yield identical scored chunks."""
        vector = [make_chunk(chunk_number=i, score=0.1 * i) for i in range(5)]
        full_doc = [make_chunk(chunk_number=i) for i in range(3, 8)]

        first = score_chunks(vector, full_doc, estimate_tokens, CONFIG)
        second = score_chunks(vector, full_doc, estimate_tokens, CONFIG)
        assert first == second
