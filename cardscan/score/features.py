"""Special-feature flags detected from the combined card text."""

import re

from ..core.types import CardFeatures
from ..ocr.regexes import FRACTION_PATTERN, find_grade

NUMBERED_PATTERNS = (
    FRACTION_PATTERN,
    re.compile(r'\bLIMITED TO \d+'),
    re.compile(r'\bNUMBERED TO \d+'),
    re.compile(r'#\d+ OF \d+'),
)
INSERT_PATTERN = re.compile(r'(?<!\w)INSERT(?!\w)')
SHORT_PRINT_PATTERN = re.compile(r'(?<!\w)(?:SSP|SP)(?!\w)(?!\s+AUTHENTIC)')
VARIATION_PATTERN = re.compile(r'(?<!\w)(?:VARIATION|VAR\.)')
ONE_OF_ONE_PATTERN = re.compile(r'(?<!\d)1\s*/\s*1(?!\d)|(?<!\w)(?:1 OF 1|ONE OF ONE)(?!\w)')


class FeatureDetector:
    """Independent whole-word checks over the uppercased text."""

    def __init__(self, keywords):
        self.keywords = keywords

    def detect(self, full_text: str) -> CardFeatures:
        text = full_text.upper()
        return CardFeatures(
            is_rookie=self.keywords.has("rookie", text),
            is_autograph=self.keywords.has("autograph", text),
            is_relic=self.keywords.has("relic", text),
            is_numbered=any(p.search(text) for p in NUMBERED_PATTERNS),
            is_graded=find_grade(text) is not None,
            is_parallel=self.keywords.has("parallels", text),
            is_insert=bool(INSERT_PATTERN.search(text)),
            is_short_print=bool(SHORT_PRINT_PATTERN.search(text)),
            is_variation=bool(VARIATION_PATTERN.search(text)),
            is_one_of_one=bool(ONE_OF_ONE_PATTERN.search(text)),
        )
