"""Tests for content-hash deduplication."""

from context_engine.rag.deduplicator import deduplicate_by_content
from context_engine.schemas.chunk import ScoredChunk
from context_engine.tests.fakes import make_chunk


def scored(chunk_number, content, score):
    return ScoredChunk(chunk=make_chunk(chunk_number=chunk_number, content=content), combined_score=score)


class TestDeduplicateByContent:
    """Test the deduplicator."""

    def test_empty_input(self):
        assert deduplicate_by_content([]) == ([], 0)

    def test_no_duplicates(self):
        chunks = [scored(0, "alpha", 0.9), scored(1, "beta", 0.5)]
        survivors, removed = deduplicate_by_content(chunks)
        assert survivors == chunks
        assert removed == 0

    def test_n_identical_chunks_leave_one_survivor(self):
        """N identical contents produce one survivor (the best score) and N-1 removals."""
        chunks = [scored(i, "same text", s) for i, s in enumerate([0.3, 0.7, 0.5, 0.6])]

        survivors, removed = deduplicate_by_content(chunks)

        assert len(survivors) == 1
        assert survivors[0].combined_score == 0.7
        assert survivors[0].chunk.chunk_number == 1
        assert removed == 3

    def test_tie_keeps_first_seen(self):
        chunks = [scored(0, "same text", 0.5), scored(1, "same text", 0.5)]
        survivors, removed = deduplicate_by_content(chunks)
        assert survivors[0].chunk.chunk_number == 0
        assert removed == 1

    def test_exact_match_only(self):
        chunks = [scored(0, "same text", 0.5), scored(1, "same text.", 0.4)]
        survivors, removed = deduplicate_by_content(chunks)
        assert len(survivors) == 2
        assert removed == 0

    def test_survivor_keeps_group_position(self):
        """A better-scored duplicate replaces the survivor in place."""
        chunks = [scored(0, "dup", 0.2), scored(1, "unique", 0.8), scored(2, "dup", 0.9)]
        survivors, _ = deduplicate_by_content(chunks)
        assert [sc.chunk.chunk_number for sc in survivors] == [2, 1]
