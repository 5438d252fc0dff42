"""Tests for chunk rendering and context injection formatting."""

from context_engine.rag.formatter import (
    CONTEXT_FOOTER,
    CONTEXT_HEADER,
    format_context_for_injection,
    render_chunks,
)
from context_engine.tests.fakes import make_chunk, words_estimator


class TestRenderChunks:
    """Test the shared chunk renderer."""

    def test_document_header_on_change(self):
        chunks = [
            make_chunk("doc1", 0, content="first", document_name="Handbook"),
            make_chunk("doc1", 1, content="second", document_name="Handbook"),
            make_chunk("doc2", 0, content="third"),
        ]

        text, document_count = render_chunks(chunks, "<start>\n", "<end>\n")

        assert text == (
            "<start>\n"
            "--- Document: Handbook ---\n"
            "first\n"
            "second\n"
            "\n--- Document: doc2 ---\n"
            "third\n"
            "<end>\n"
        )
        assert document_count == 2

    def test_chunks_without_document_id(self):
        text, document_count = render_chunks([make_chunk("", 0, content="loose text")], "", "")
        assert text == "loose text\n"
        assert document_count == 0


class TestFormatContextForInjection:
    """Test injection formatting with truncation."""

    def test_empty_input(self):
        result = format_context_for_injection([])
        assert result.formatted_context == ""
        assert result.chunk_count == 0
        assert result.strategy == "none"
        assert result.truncated is False

    def test_all_chunks_fit(self):
        chunks = [make_chunk("doc1", i, content="one two three") for i in range(3)]

        result = format_context_for_injection(chunks, 0, words_estimator, strategy="hybrid")

        assert result.formatted_context.startswith(CONTEXT_HEADER)
        assert result.formatted_context.endswith(CONTEXT_FOOTER)
        assert result.chunk_count == 3
        assert result.document_count == 1
        assert result.strategy == "hybrid"
        assert result.truncated is False
        assert result.metadata == {"original_chunk_count": 3, "truncated_count": 0}

    def test_truncates_at_first_chunk_over_limit(self):
        # The header alone estimates to 4 words
        chunks = [
            make_chunk("doc1", 0, content="a b c"),
            make_chunk("doc1", 1, content="d e f g h i"),
            make_chunk("doc1", 2, content="j"),
        ]

        result = format_context_for_injection(chunks, 10, words_estimator)

        assert result.chunk_count == 1
        assert result.truncated is True
        assert "a b c" in result.formatted_context
        assert "j\n" not in result.formatted_context
        assert result.metadata["truncated_count"] == 2
