"""Tests for ytd_collector.core.tokenizer module.

Tests the two-pass glyph-run merge:
- merge_fragments(): single-character runs collapse into one token
- split_tokens(): merged runs re-split on whitespace
- TokenStream: lazy, restartable iteration
"""

from ytd_collector.core.tokenizer import TokenStream, merge_fragments, split_tokens, tokenize


GLYPH_FRAGMENTS = ["N", "o", "n", "-", "F", "a", "t", "a", "l", " ", "Shooting", " ", "12", " ", "34"]


# =============================================================================
# Merge pass
# =============================================================================


class TestMergeFragments:
    """Tests for the first (merge) pass."""

    def test_glyph_run_collapses_into_one_token(self):
        merged = list(merge_fragments(["N", "o", "n", "Shooting"]))
        assert merged == ["Non", "Shooting"]

    def test_multi_character_fragment_is_trimmed(self):
        assert list(merge_fragments(["  Homicide  "])) == ["Homicide"]

    def test_whitespace_fragment_joins_run_as_space(self):
        merged = list(merge_fragments(["a", " ", "b"]))
        assert merged == ["a b"]

    def test_trailing_run_is_flushed(self):
        assert list(merge_fragments(["Total", "4", "2"])) == ["Total", "42"]

    def test_empty_input(self):
        assert list(merge_fragments([])) == []


class TestSplitTokens:
    """Tests for the second (split) pass."""

    def test_splits_on_internal_whitespace(self):
        assert list(split_tokens(["Non-Fatal Shooting", "12"])) == ["Non-Fatal", "Shooting", "12"]

    def test_drops_whitespace_only_tokens(self):
        assert list(split_tokens([" ", "x"])) == ["x"]


# =============================================================================
# End to end
# =============================================================================


class TestTokenize:
    """Tests for the full tokenizer."""

    def test_glyph_per_fragment_font(self):
        assert list(tokenize(GLYPH_FRAGMENTS)) == ["Non-Fatal", "Shooting", "12", "34"]

    def test_two_glyph_words_without_separator_fragment(self):
        """Two single-glyph words separated only by a space glyph still split."""
        fragments = ["Y", "T", "D", " ", "T", "o", "t", "a", "l", "Count"]
        assert list(tokenize(fragments)) == ["YTD", "Total", "Count"]

    def test_adjacent_single_digit_fragments_merge(self):
        assert list(tokenize(["Homicide", "3", "9"])) == ["Homicide", "39"]


class TestTokenStream:
    """Tests for TokenStream."""

    def test_is_restartable(self):
        stream = TokenStream(GLYPH_FRAGMENTS)
        assert list(stream) == list(stream)

    def test_accepts_one_shot_iterables(self):
        stream = TokenStream(iter(GLYPH_FRAGMENTS))
        assert list(stream) == ["Non-Fatal", "Shooting", "12", "34"]
        assert list(stream) == ["Non-Fatal", "Shooting", "12", "34"]

    def test_len_counts_tokens(self):
        assert len(TokenStream(GLYPH_FRAGMENTS)) == 4

    def test_text_joins_with_spaces(self):
        assert TokenStream(GLYPH_FRAGMENTS).text() == "Non-Fatal Shooting 12 34"

    def test_repr_mentions_fragment_count(self):
        assert "15 fragments" in repr(TokenStream(GLYPH_FRAGMENTS))
