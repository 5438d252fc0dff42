"""Tests for core utilities: text normalization, token estimation and content hashing."""

import pytest

from context_engine.core.hashing import content_hash, sha256
from context_engine.core.text import estimate_tokens, normalize


class TestTextNormalize:
    """Test text normalization function."""

    def test_collapses_mixed_whitespace(self):
        """Test that mixed whitespace (spaces, tabs, newlines) is collapsed."""
        text = "Hello\t\t  world\n\n  \twith\t \n mixed   whitespace"
        assert normalize(text) == "Hello world with mixed whitespace"

    def test_normalizes_unicode_quotes_and_dashes(self):
        """Test that typographic quotes and dashes become ASCII."""
        text = "“Hello” and ‘world’, en–dash and em—dash"
        assert normalize(text) == "\"Hello\" and 'world', en-dash and em-dash"

    def test_empty_and_none(self):
        """Test that empty or None input returns empty string."""
        assert normalize("") == ""
        assert normalize(None) == ""

    def test_whitespace_only_returns_empty(self):
        """Test that whitespace-only string returns empty string."""
        assert normalize("   \n\n\t  \n  ") == ""


class TestEstimateTokens:
    """Test the default token estimation heuristic."""

    def test_four_characters_per_token(self):
        assert estimate_tokens("abcd" * 10) == 10

    def test_rounds_down(self):
        assert estimate_tokens("abcdefg") == 1

    def test_empty_text(self):
        assert estimate_tokens("") == 0
        assert estimate_tokens(None) == 0

    def test_monotonic_in_length(self):
        """Longer text never estimates to fewer tokens."""
        counts = [estimate_tokens("x" * n) for n in range(0, 50)]
        assert counts == sorted(counts)


class TestSha256Hashing:
    """Test SHA-256 content hashing function."""

    def test_known_input_maps_to_expected_hash(self):
        """Test that known inputs produce expected hash values."""
        expected = "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08"
        assert sha256("test") == expected

    def test_empty_string_hash(self):
        """Test that empty string produces valid hash."""
        expected = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        assert sha256("") == expected

    def test_type_error_for_non_string(self):
        """Test that non-string input raises TypeError."""
        with pytest.raises(TypeError, match="Input must be a string"):
            sha256(123)

        with pytest.raises(TypeError, match="Input must be a string"):
            sha256(None)


class TestContentHash:
    """Test the short content fingerprint used for deduplication."""

    def test_is_prefix_of_sha256(self):
        assert content_hash("test") == "9f86d081884c7d65"

    def test_custom_length(self):
        assert len(content_hash("test", length=32)) == 32

    def test_exact_match_only(self):
        """Whitespace or case differences produce different fingerprints."""
        assert content_hash("Some text") != content_hash("some text")
        assert content_hash("Some text") != content_hash("Some text ")
