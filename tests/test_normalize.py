"""Tests for text normalization and look-alike correction."""

import pytest

from cardscan.ocr.normalize import TextNormalizer, normalize_punctuation


class TestPunctuation:
    """Test quote and dash normalization."""

    def test_quotes_and_dashes(self):
        """Curly quotes become straight quotes and dash variants become hyphens."""
        assert normalize_punctuation("“Shaq” O’Neal – 1992") == "\"Shaq\" O'Neal - 1992"


class TestTextNormalizer:
    """Test context-aware correction with the reference confusion tables."""

    def test_letters_in_numeric_tokens(self, normalizer):
        """Misread letters inside a serial become digits."""
        text, count = normalizer.correct("15O/25O")

        assert text == "150/250"
        assert count == 2

    def test_card_codes_keep_their_letters(self, normalizer):
        """Leading letter codes are card numbers, not misread digits."""
        text, count = normalizer.correct("B12")

        assert text == "B12"
        assert count == 0

    def test_digits_between_letters(self, normalizer):
        """Digits inside words become the letters they resemble."""
        text, count = normalizer.correct("T0PPS")

        assert text == "TOPPS"
        assert count == 1

    def test_lowercase_neighbours_pick_lowercase(self, normalizer):
        """Case of the replacement follows the preceding letter."""
        text, _ = normalizer.correct("Bowrnan Chr0me")

        assert text == "Bowman Chrome"

    def test_double_i_touching_lowercase(self, normalizer):
        """II next to lowercase letters reads as ll."""
        text, count = normalizer.correct("PhiIIies")

        assert text == "Phillies"
        assert count >= 1

    def test_roman_numerals_untouched(self, normalizer):
        """Standalone II and III stay as they are."""
        text, count = normalizer.correct("Cal Ripken III")

        assert text == "Cal Ripken III"
        assert count == 0

    def test_sequence_swap_needs_vocabulary(self, normalizer):
        """rn/m swaps only apply when the result is a known word."""
        fixed, _ = normalizer.correct("PRIZRN")
        unknown, count = normalizer.correct("Burnley")

        assert fixed == "PRIZM"
        assert unknown == "Burnley"
        assert count == 0

    def test_clean_text_collapses_whitespace(self, normalizer):
        """clean_text joins lines into single-spaced text."""
        assert normalizer.clean_text("2023  Topps\n\nChrome\t150/250") == "2023 Topps Chrome 150/250"

    def test_normalize_line_keeps_line(self, normalizer):
        """normalize_line trims and collapses spaces."""
        assert normalizer.normalize_line("  MIKE    TROUT  ") == "MIKE TROUT"

    def test_normalize_line_counted(self, normalizer):
        """The correction count is returned alongside the line."""
        line, count = normalizer.normalize_line_counted("Serial 15O/25O")

        assert line == "Serial 150/250"
        assert count == 2

    def test_without_tables_nothing_changes(self):
        """A normalizer without confusion tables only cleans punctuation."""
        bare = TextNormalizer()

        assert bare.correct("T0PPS 15O/25O") == ("T0PPS 15O/25O", 0)
        assert bare.clean_text("A  ‘B’") == "A 'B'"


if __name__ == "__main__":
    pytest.main([__file__])
