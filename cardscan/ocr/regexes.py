"""Regex patterns for trading card text extraction."""

import re
from typing import Dict, List, Optional, Tuple

# Years 1600-2099 so implausible years are still reported, optional "-YY" season suffix
YEAR_PATTERN = re.compile(r'\b((?:1[6-9]|20)\d{2})(?:-(\d{2}))?\b')
BARE_YEAR_PATTERN = re.compile(r'(?<!\d)(19\d{2}|20\d{2})(?!\d)')

FRACTION_PATTERN = re.compile(r'\b(\d+)\s*/\s*(\d+)\b')
CURRENCY_PATTERN = re.compile(r'\$\s?\d+(?:,\d{3})*(?:\.\d+)?')
PERCENTAGE_PATTERN = re.compile(r'\b\d+(?:\.\d+)?%')
ALPHANUMERIC_PATTERN = re.compile(r'\b[A-Z]{1,3}-?\d{1,4}\b')
STATS_PATTERN = re.compile(
    r'(\d*\.?\d+)\s*(AVG|HR|RBI|PPG|RPG|APG|TD|YDS|G|A|PTS)\b', re.IGNORECASE
)
SET_INFO_PATTERN = re.compile(r'\b(BASE SET|INSERT|PARALLEL|VARIATION|SSP|SP)\b', re.IGNORECASE)

GRADE_PATTERNS: Dict[str, re.Pattern] = {
    'PSA': re.compile(r'\bPSA\s*(\d+(?:\.\d+)?)'),
    'BGS': re.compile(r'\bBGS\s*(\d+(?:\.\d+)?)'),
    'SGC': re.compile(r'\bSGC\s*(\d+(?:\.\d+)?)'),
    'CGC': re.compile(r'\bCGC\s*(\d+(?:\.\d+)?)'),
}
CERT_PATTERN = re.compile(r'Cert(?:ification)?\s*(?:#|No\.?)?:?\s*(\d{7,})', re.IGNORECASE)

# Card number lines: "#RA-15", "RC-7", "No. 30" or a bare "30" / "30A"
CARD_NUMBER_PATTERN = re.compile(r'#?\w+-?\d+')
BARE_CARD_NUMBER_PATTERN = re.compile(r'^\d+[A-Z]?$')
CARD_NUMBER_PREFIX = re.compile(r'^(?:Card\s*)?(?:No\.?\s*)?#?\s*', re.IGNORECASE)

_PATTERN_GROUPS = (
    ('years', YEAR_PATTERN),
    ('fractions', FRACTION_PATTERN),
    ('currency', CURRENCY_PATTERN),
    ('percentages', PERCENTAGE_PATTERN),
    ('alphanumeric', ALPHANUMERIC_PATTERN),
    ('stats', STATS_PATTERN),
    ('set_info', SET_INFO_PATTERN),
)


def extract_patterns(text: str) -> Dict[str, List[str]]:
    """
    Find every pattern group in text, keeping only non-empty groups.

    Each group lists the full matched strings in order of appearance.

    Examples:
        >>> extract_patterns("2023 Topps Chrome 150/250")
        {'years': ['2023'], 'fractions': ['150/250']}
    """
    found: Dict[str, List[str]] = {}
    for name, pattern in _PATTERN_GROUPS:
        matches = [m.group(0) for m in pattern.finditer(text)]
        if matches:
            found[name] = matches
    return found


def parse_serial(text: str) -> Optional[Tuple[int, int]]:
    """
    Parse the first "N/M" serial fraction in text.

    Examples:
        >>> parse_serial("Serial Numbered 150/250")
        (150, 250)
        >>> parse_serial("12 / 99")
        (12, 99)
    """
    match = FRACTION_PATTERN.search(text)
    if match:
        return int(match.group(1)), int(match.group(2))
    return None


def is_serial_fraction(text: str) -> bool:
    return FRACTION_PATTERN.search(text) is not None


def find_grade(text: str) -> Optional[Tuple[str, str]]:
    """
    Find a grading company and grade such as "PSA 10" or "BGS 9.5".

    Returns:
        Tuple of (company, grade), or None
    """
    for company, pattern in GRADE_PATTERNS.items():
        match = pattern.search(text)
        if match:
            return company, match.group(1)
    return None


def find_cert_number(text: str) -> Optional[str]:
    """Certification number: "Cert" followed by seven or more digits."""
    match = CERT_PATTERN.search(text)
    return match.group(1) if match else None


def is_card_number(text: str) -> bool:
    """Whether a short region looks like a card number line, prefix included."""
    stripped = text.strip()
    return bool(
        CARD_NUMBER_PATTERN.search(stripped)
        or BARE_CARD_NUMBER_PATTERN.match(strip_card_number_prefix(stripped))
    )


def strip_card_number_prefix(text: str) -> str:
    """
    Remove a leading "Card", "No." or "#" from a card number.

    Examples:
        >>> strip_card_number_prefix("#RA-15")
        'RA-15'
        >>> strip_card_number_prefix("Card No. 30")
        '30'
    """
    return CARD_NUMBER_PREFIX.sub('', text.strip()).strip()
