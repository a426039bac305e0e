"""Tests for card text regex patterns and helpers."""

import pytest

from cardscan.ocr.regexes import (
    BARE_YEAR_PATTERN,
    YEAR_PATTERN,
    extract_patterns,
    find_cert_number,
    find_grade,
    is_card_number,
    parse_serial,
    strip_card_number_prefix,
)


class TestExtractPatterns:
    """Test pattern group extraction."""

    def test_only_non_empty_groups_returned(self):
        """Groups without matches are left out entirely."""
        result = extract_patterns("2023 Topps Chrome 150/250")

        assert result == {"years": ["2023"], "fractions": ["150/250"]}

    def test_empty_text_gives_no_groups(self):
        """No text, no groups."""
        assert extract_patterns("") == {}

    def test_season_year_suffix(self):
        """Season years like 2019-20 match as a whole."""
        result = extract_patterns("2019-20 Panini Prizm")

        assert result["years"] == ["2019-20"]

    def test_implausible_years_still_reported(self):
        """Years from 1600 on are matched so the validator can flag them."""
        assert extract_patterns("1776 Topps")["years"] == ["1776"]
        assert YEAR_PATTERN.search("1599 Topps") is None

    def test_bare_year_inside_longer_number_ignored(self):
        """Digits inside a cert or serial number are never a bare year."""
        assert BARE_YEAR_PATTERN.search("Cert 12019876") is None
        assert BARE_YEAR_PATTERN.search("Copyright2023").group(1) == "2023"

    def test_currency_and_percentages(self):
        """Dollar amounts and percentages have their own groups."""
        result = extract_patterns("Sold for $1,250.00 up 15%")

        assert result["currency"] == ["$1,250.00"]
        assert result["percentages"] == ["15%"]

    def test_alphanumeric_card_codes(self):
        """Short letter prefixes with digits look like card codes."""
        result = extract_patterns("#RA-15 and US1")

        assert result["alphanumeric"] == ["RA-15", "US1"]

    def test_stats_case_insensitive(self):
        """Stat units match regardless of case."""
        result = extract_patterns(".293 avg 41 HR 106 RBI")

        assert result["stats"] == [".293 avg", "41 HR", "106 RBI"]

    def test_set_info_keywords(self):
        """Set descriptors such as INSERT and SSP are collected."""
        result = extract_patterns("Gold Insert SSP")

        assert result["set_info"] == ["Insert", "SSP"]


class TestSerialParsing:
    """Test serial number fraction parsing."""

    def test_valid_serials(self):
        """Test various valid serial formats."""
        test_cases = [
            ("150/250", (150, 250)),
            ("Serial Numbered 150/250", (150, 250)),
            ("  12 / 99  ", (12, 99)),
            ("1/1", (1, 1)),
            ("300/250", (300, 250)),
        ]

        for input_text, expected in test_cases:
            assert parse_serial(input_text) == expected, f"Should parse: {input_text}"

    def test_invalid_serials(self):
        """Text without a fraction gives None."""
        for input_text in ["", "150", "150-250", "/250", "no numbers"]:
            assert parse_serial(input_text) is None, f"Should not parse: {input_text}"


class TestGrading:
    """Test grading label and certification patterns."""

    def test_find_grade_companies(self):
        """Each supported grading company is recognized."""
        assert find_grade("PSA 10") == ("PSA", "10")
        assert find_grade("BGS 9.5") == ("BGS", "9.5")
        assert find_grade("SGC9") == ("SGC", "9")
        assert find_grade("CGC 8.5 NM/MINT+") == ("CGC", "8.5")

    def test_find_grade_missing(self):
        """Unknown companies and bare numbers are not grades."""
        assert find_grade("ABC 10") is None
        assert find_grade("GEM MINT") is None

    def test_cert_number_needs_seven_digits(self):
        """Certification numbers are at least seven digits long."""
        assert find_cert_number("Cert #12345678") == "12345678"
        assert find_cert_number("Certification No. 1234567") == "1234567"
        assert find_cert_number("cert: 7654321") == "7654321"
        assert find_cert_number("Cert #123456") is None


class TestCardNumbers:
    """Test card number helpers."""

    def test_strip_prefix(self):
        """Leading Card, No. and # are removed."""
        assert strip_card_number_prefix("#RA-15") == "RA-15"
        assert strip_card_number_prefix("Card No. 30") == "30"
        assert strip_card_number_prefix("No.7") == "7"
        assert strip_card_number_prefix("Card #US1") == "US1"
        assert strip_card_number_prefix("RC-7") == "RC-7"

    @pytest.mark.parametrize("text", ["#30", "30", "30A", "RA-15", "#US1", "#7", "Card No. 7"])
    def test_is_card_number(self, text):
        """Short code lines are card numbers."""
        assert is_card_number(text)

    @pytest.mark.parametrize("text", ["", "Topps", "ROOKIE"])
    def test_is_not_card_number(self, text):
        """Lines without digits are not card numbers."""
        assert not is_card_number(text)


if __name__ == "__main__":
    pytest.main([__file__])
