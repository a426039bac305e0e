"""Turn recognized card text into positioned text regions."""

import re
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any, List, Optional, Tuple

from ..core.constants import BACK_OF_CARD_SEPARATOR, MAX_REGION_CONFIDENCE, POSITION_ORDER
from ..core.types import ExtractedText, TextRegion
from ..reference.keywords import tokenize_words, word_pattern
from ..utils.config import settings
from ..utils.log import LoggerMixin
from ..utils.validation import validate_enum_value
from .backends import OCRBackend
from .normalize import TextNormalizer
from .regexes import SET_INFO_PATTERN, find_cert_number, find_grade, is_serial_fraction

SIDES = ["front", "back"]

LEADING_YEAR = re.compile(r'^(?:1[6-9]|20)\d{2}\b')
CARD_NUMBER_LINE = re.compile(
    r'^(?:(?:Card\s*)?(?:No\.?\s*)?#\s*|(?:Card|No\.?)\s+)?[A-Z]{0,3}-?\d{1,4}[A-Z]?$',
    re.IGNORECASE,
)
NAME_WORD = re.compile(r"^[^\W\d_]+(?:[.'-][^\W\d_]*)*$")
PLAIN_CHARACTERS = frozenset("#/.,'\"&:-()%$+ ")
MAX_PENALIZED_CORRECTIONS = 5


def region_confidence(text: str, corrections: int = 0) -> float:
    """
    Heuristic confidence for one recognized line.

    Starts from the share of plausible characters and loses a little for
    every look-alike correction that was needed, capped at 0.98.
    """
    if not text:
        return 0.0
    plain = sum(1 for c in text if c.isalnum() or c in PLAIN_CHARACTERS)
    ratio = plain / len(text)
    score = 0.5 + 0.48 * ratio - 0.02 * min(corrections, MAX_PENALIZED_CORRECTIONS)
    return round(max(0.0, min(MAX_REGION_CONFIDENCE, score)), 3)


def assemble_full_text(regions: List[TextRegion]) -> str:
    """Join region texts in reading order: top, left, middle, right, bottom."""
    rank = {position: i for i, position in enumerate(POSITION_ORDER)}
    ordered = sorted(regions, key=lambda r: rank.get(r.position, len(rank)))
    return "\n".join(r.text for r in ordered)


def combine_sides(front: ExtractedText, back: Optional[ExtractedText] = None) -> str:
    """Front full text, followed by the back full text behind a separator when present."""
    if back is not None and back.full_text:
        return f"{front.full_text}{BACK_OF_CARD_SEPARATOR}{back.full_text}"
    return front.full_text


class LineSegmenter:
    """
    Classifies raw OCR lines into positioned regions.

    Front lines are placed by what they look like (grading label, brand
    line, player name, team, card number). Back lines are split into thirds.
    """

    def __init__(self, reference, normalizer: Optional[TextNormalizer] = None):
        self.reference = reference
        self.normalizer = normalizer or TextNormalizer.from_reference(reference)
        self._manufacturer_pattern = word_pattern(
            list(reference.keywords.manufacturer_names)
            + [m.name for m in reference.manufacturers.manufacturers()]
        )

    def segment(self, raw_text: str, side: str = "front") -> List[TextRegion]:
        validate_enum_value(side, SIDES, field_name="side")
        lines: List[Tuple[str, int]] = []
        for raw_line in raw_text.splitlines():
            line, corrections = self.normalizer.normalize_line_counted(raw_line)
            if line:
                lines.append((line, corrections))

        if side == "back":
            return self._segment_back(lines)
        return [self._classify_front(line, corrections) for line, corrections in lines]

    def _segment_back(self, lines: List[Tuple[str, int]]) -> List[TextRegion]:
        regions = []
        total = len(lines)
        for i, (line, corrections) in enumerate(lines):
            position = ("top", "middle", "bottom")[min(2, i * 3 // total)]
            font_size = "medium" if CARD_NUMBER_LINE.match(line) else "small"
            regions.append(TextRegion(
                text=line,
                confidence=region_confidence(line, corrections),
                position=position,
                font_size=font_size,
            ))
        return regions

    def _classify_front(self, line: str, corrections: int) -> TextRegion:
        confidence = region_confidence(line, corrections)

        def region(position: str, font_size: str, is_bold: bool = False) -> TextRegion:
            return TextRegion(line, confidence, position, font_size, is_bold)

        if find_grade(line):
            return region("top", "large", True)
        if find_cert_number(line):
            return region("top", "small")
        if self._is_brand_line(line):
            return region("top", "medium")
        if CARD_NUMBER_LINE.match(line):
            return region("bottom", "small")
        if is_serial_fraction(line):
            return region("bottom", "small")

        players = self.reference.players
        known_player = players.is_known_player(line)
        if not known_player and players.find_team(line):
            return region("middle", "medium")
        if known_player or self._is_player_shaped(line):
            return region("middle", "large", True)
        if self._is_title_case_name(line):
            return region("middle", "medium")
        return region("middle", "small")

    def _is_brand_line(self, line: str) -> bool:
        if LEADING_YEAR.match(line):
            return True
        return bool(self._manufacturer_pattern.search(line.upper()))

    def _is_player_shaped(self, line: str) -> bool:
        """All-caps line of two to four name words with no card vocabulary."""
        if line != line.upper() or not any(c.isalpha() for c in line):
            return False
        words = line.split()
        if not 2 <= len(words) <= 4:
            return False
        if not all(NAME_WORD.match(w) for w in words):
            return False
        if SET_INFO_PATTERN.search(line):
            return False
        card_words = self.reference.keywords.vocabulary
        return not any(w.strip(".'-") in card_words for w in words)

    def _is_title_case_name(self, line: str) -> bool:
        """Title-case line of one to four words, none of them card vocabulary."""
        words = line.split()
        if not 1 <= len(words) <= 4 or any(c.isdigit() for c in line):
            return False
        if not all(w[:1].isupper() and w[1:] == w[1:].lower() for w in words):
            return False
        card_words = self.reference.keywords.vocabulary
        return not any(w in card_words for w in tokenize_words(line))


def text_to_extracted(raw_text: str, side: str, segmenter: LineSegmenter) -> ExtractedText:
    """Build an ExtractedText from text that has already been recognized."""
    if not raw_text or not raw_text.strip():
        return ExtractedText.empty()
    regions = tuple(segmenter.segment(raw_text, side))
    if not regions:
        return ExtractedText.empty()
    return ExtractedText(regions=regions, full_text=assemble_full_text(list(regions)))


class OCRTextExtractor(LoggerMixin):
    """
    Text extraction backed by a real OCR engine.

    The backend runs on a single-use worker thread with a bounded wait. On a
    timeout or any backend error the fallback extractor is used instead, so
    this never raises.
    """

    def __init__(
        self,
        backend: OCRBackend,
        segmenter: LineSegmenter,
        fallback=None,
        timeout_seconds: Optional[float] = None,
    ):
        self.backend = backend
        self.segmenter = segmenter
        self.fallback = fallback
        self.timeout_seconds = timeout_seconds or settings.OCR_TIMEOUT_SECONDS

    def extract_text(self, image: Any, side: str = "front") -> ExtractedText:
        context = self.log_start("ocr_extract", side=side, backend=self.backend.name)
        pool = ThreadPoolExecutor(max_workers=1)
        try:
            future = pool.submit(self.backend.extract_text, image)
            raw_text = future.result(timeout=self.timeout_seconds)
        except FuturesTimeoutError:
            self.logger.warning(
                "OCR timed out, using fallback",
                side=side,
                timeout_seconds=self.timeout_seconds,
            )
            return self._fall_back(image, side)
        except Exception as e:
            self.logger.warning(
                "OCR failed, using fallback",
                side=side,
                error=str(e),
                error_type=type(e).__name__,
            )
            return self._fall_back(image, side)
        finally:
            # An abandoned call keeps running on its worker; nobody waits for it
            pool.shutdown(wait=False)

        extracted = text_to_extracted(raw_text, side, self.segmenter)
        self.log_success(context, regions=len(extracted.regions))
        return extracted

    def extract_card(
        self, front: Any, back: Any = None
    ) -> Tuple[ExtractedText, Optional[ExtractedText]]:
        front_text = self.extract_text(front, "front")
        back_text = self.extract_text(back, "back") if back is not None else None
        return front_text, back_text

    def _fall_back(self, image: Any, side: str) -> ExtractedText:
        if self.fallback is None:
            return ExtractedText.empty()
        return self.fallback.extract_text(image, side)
