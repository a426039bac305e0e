"""Resolve extracted text regions into structured card fields."""

import re
from datetime import datetime
from typing import Dict, List, Optional

from ..core.constants import (
    BRAND_REGION_MIN_CONFIDENCE,
    GRADING_REGION_MIN_CONFIDENCE,
    MIN_CARD_YEAR,
    OTHER_CATEGORY,
)
from ..core.types import ExtractedCardData, ExtractedText, PlayerInfo, TextRegion
from ..ocr.regexes import (
    BARE_CARD_NUMBER_PATTERN,
    BARE_YEAR_PATTERN,
    CARD_NUMBER_PATTERN,
    find_cert_number,
    find_grade,
    is_card_number,
    is_serial_fraction,
    parse_serial,
    strip_card_number_prefix,
)
from ..reference.keywords import word_pattern
from ..utils.error_handler import ErrorContext, safe_execute
from ..utils.log import LoggerMixin

MIN_SPORT_KEYWORD_HITS = 2
VARIATION_PATTERN = re.compile(r'(?<!\w)(?:VARIATION|VAR\.)', re.IGNORECASE)
GENERATIONAL_SUFFIXES = {"JR": "Jr", "JR.": "Jr.", "SR": "Sr", "SR.": "Sr."}
ROMAN_NUMERALS = {"II", "III", "IV"}
EDGE_PUNCTUATION = " \t.,;:!?'\"-#*"
INITIALS = re.compile(r"(?:[^\W\d_]\.){1,3}")


def title_case_name(text: str) -> str:
    """
    Title-case a name read off a card.

    Generational suffixes become "Jr."/"Sr.", roman numerals and dotted
    initials ("T.J.") stay uppercase, and apostrophe or hyphen parts are
    capitalized separately ("O'NEAL" -> "O'Neal").
    """
    words = []
    for word in text.split():
        upper = word.upper()
        if upper in GENERATIONAL_SUFFIXES:
            words.append(GENERATIONAL_SUFFIXES[upper])
        elif upper in ROMAN_NUMERALS:
            words.append(upper)
        elif INITIALS.fullmatch(word):
            words.append(upper)
        else:
            words.append(re.sub(r"[^\W\d_]+", lambda m: m.group(0).capitalize(), word))
    return " ".join(words)


class FieldResolver(LoggerMixin):
    """
    Builds ExtractedCardData from positioned regions and pattern matches.

    Each step fills its own fields and leaves them unset on a miss. A step
    that fails is logged and skipped so the remaining steps still run.
    """

    def __init__(self, reference, current_year: Optional[int] = None):
        self.reference = reference
        self.current_year = current_year

    def _year_now(self) -> int:
        return self.current_year or datetime.now().year

    def resolve(
        self,
        front: ExtractedText,
        back: Optional[ExtractedText],
        full_text: str,
        patterns: Dict[str, List[str]],
        sport_hint: Optional[str] = None,
    ) -> ExtractedCardData:
        data = ExtractedCardData()
        used: List[TextRegion] = []
        back_regions = list(back.regions) if back else []
        all_regions = list(front.regions) + back_regions

        steps = [
            ("brand", self._resolve_brand, (data, front, used)),
            ("player", self._resolve_player, (data, front, used)),
            ("team", self._resolve_team, (data, front, used)),
            ("card_number", self._resolve_card_number, (data, front, back_regions, patterns)),
            ("year", self._resolve_year, (data, patterns, full_text)),
            ("serial", self._resolve_serial, (data, patterns)),
            ("parallel", self._resolve_parallel, (data, front, all_regions, used)),
            ("category", self._resolve_category, (data, full_text, patterns, sport_hint)),
            ("cross_validation", self._cross_validate, (data, full_text)),
            ("grading", self._resolve_grading, (data, all_regions, full_text)),
        ]
        for name, step, args in steps:
            safe_execute(
                step,
                *args,
                context=ErrorContext(operation=f"resolve {name}", module=__name__, function=step.__name__),
                logger=self.logger,
            )
        return data

    # Steps

    def _resolve_brand(self, data: ExtractedCardData, front: ExtractedText, used: List[TextRegion]):
        for region in front.by_position("top"):
            if region.confidence <= BRAND_REGION_MIN_CONFIDENCE:
                continue
            brand = self.reference.keywords.match_brand(region.text)
            if brand:
                data.brand = brand.display
                data.set_name = region.text
                used.append(region)
                return

    def _resolve_player(self, data: ExtractedCardData, front: ExtractedText, used: List[TextRegion]):
        best: Optional[TextRegion] = None
        for region in front.by_position("middle"):
            if region.font_size == "large" and region.is_bold:
                if best is None or region.confidence > best.confidence:
                    best = region
        if best is None:
            return

        used.append(best)
        player = self.reference.players.find_player(best.text)
        if player:
            data.player = player.name
            data.category = player.sport
        else:
            data.player = title_case_name(best.text.strip(EDGE_PUNCTUATION))

    def _resolve_team(self, data: ExtractedCardData, front: ExtractedText, used: List[TextRegion]):
        candidates = [
            region for region in front.by_position("middle")
            if region.font_size == "medium" and not region.is_bold and region not in used
            and not (data.player and region.text.strip().upper() == data.player.upper())
        ]
        player = self._known_player(data)
        if candidates:
            region = self._pick_team_region(player, candidates)
            used.append(region)
            team = self.reference.players.find_team(region.text, sport=data.category)
            if team:
                data.team = team.name
                if not data.category:
                    data.category = team.sport
            else:
                data.team = title_case_name(region.text.strip(EDGE_PUNCTUATION))
            return

        if player and player.primary_team:
            data.team = player.primary_team

    def _pick_team_region(self, player: Optional[PlayerInfo], candidates: List[TextRegion]) -> TextRegion:
        """First candidate the known player played for, otherwise the first candidate."""
        if player:
            for region in candidates:
                if self.reference.players.validate_player_team(player.name, region.text):
                    return region
        return candidates[0]

    def _known_player(self, data: ExtractedCardData) -> Optional[PlayerInfo]:
        if not data.player:
            return None
        return self.reference.players.find_player(data.player, fuzzy=False)

    def _resolve_card_number(
        self,
        data: ExtractedCardData,
        front: ExtractedText,
        back_regions: List[TextRegion],
        patterns: Dict[str, List[str]],
    ):
        candidates = [r for r in front.by_position("bottom") if not is_serial_fraction(r.text)]
        candidates += [r for r in back_regions if r.position == "top" and not is_serial_fraction(r.text)]
        for region in candidates:
            number = self._card_number_from(region.text)
            if number:
                data.card_number = number
                return

        alphanumeric = patterns.get("alphanumeric")
        if alphanumeric:
            data.card_number = strip_card_number_prefix(alphanumeric[0])

    @staticmethod
    def _card_number_from(text: str) -> Optional[str]:
        if not is_card_number(text):
            return None
        stripped = strip_card_number_prefix(text)
        if BARE_CARD_NUMBER_PATTERN.match(stripped):
            return stripped
        match = CARD_NUMBER_PATTERN.search(text)
        return strip_card_number_prefix(match.group(0)) or None

    def _resolve_year(self, data: ExtractedCardData, patterns: Dict[str, List[str]], full_text: str):
        years = patterns.get("years")
        if years:
            data.year = years[0][:4]
            return
        match = BARE_YEAR_PATTERN.search(full_text)
        if match:
            data.year = match.group(1)

    def _resolve_serial(self, data: ExtractedCardData, patterns: Dict[str, List[str]]):
        fractions = patterns.get("fractions")
        if not fractions:
            return
        serial = parse_serial(fractions[0])
        if serial:
            numerator, denominator = serial
            data.serial_number = f"{numerator}/{denominator}"
            data.print_run = denominator

    def _resolve_parallel(
        self,
        data: ExtractedCardData,
        front: ExtractedText,
        all_regions: List[TextRegion],
        used: List[TextRegion],
    ):
        keywords = self.reference.keywords
        for region in front.regions:
            if region in used:
                continue
            if keywords.has("parallels", region.text):
                data.parallel = region.text
                break

        for region in all_regions:
            if VARIATION_PATTERN.search(region.text):
                data.variation = region.text
                break

    def _resolve_category(
        self,
        data: ExtractedCardData,
        full_text: str,
        patterns: Dict[str, List[str]],
        sport_hint: Optional[str],
    ):
        if data.category:
            return

        if data.brand:
            sport = self.reference.manufacturers.sport_from_brand(data.brand, full_text)
            if sport:
                data.category = sport
                return

        if sport_hint:
            data.category = sport_hint
            return

        for sport, hits in self.reference.keywords.sport_hits(full_text).items():
            if hits >= MIN_SPORT_KEYWORD_HITS:
                data.category = sport
                return

        stats = " ".join(patterns.get("stats", [])).upper()
        if stats:
            for sport, units in self.reference.keywords.stat_units.items():
                if word_pattern(units).search(stats):
                    data.category = sport
                    return

        data.category = OTHER_CATEGORY

    def _cross_validate(self, data: ExtractedCardData, full_text: str):
        """Replace a brand whose manufacturer could not have made this sport's cards that year."""
        if not (data.brand and data.category and data.year and data.year.isdigit()):
            return
        year = int(data.year)
        if not MIN_CARD_YEAR <= year <= self._year_now() + 1:
            return

        registry = self.reference.manufacturers
        if not registry.get_valid_manufacturers(data.category, year):
            return
        named = registry.manufacturers_in(data.brand)
        if any(registry.validate_manufacturer(m, data.category, year) for m in named):
            return
        if registry.set_licensee(data.brand, data.category, year):
            return

        is_rookie = self.reference.keywords.has("rookie", full_text) or (
            bool(data.player) and self.reference.players.is_rookie_year(data.player, year)
        )
        choice = registry.realistic_manufacturer(data.category, year, is_rookie=is_rookie)
        if not choice:
            return
        manufacturer, set_name = choice
        corrected = f"{year} {registry.format_set(manufacturer, set_name)}"
        self.logger.info(
            "Brand corrected for licensing",
            original=data.brand,
            corrected=corrected,
            category=data.category,
            year=year,
        )
        data.brand = corrected

    def _resolve_grading(self, data: ExtractedCardData, regions: List[TextRegion], full_text: str):
        for region in regions:
            if region.confidence <= GRADING_REGION_MIN_CONFIDENCE:
                continue
            grade = find_grade(region.text)
            if grade:
                data.grading_company, data.grade = grade
                data.cert_number = find_cert_number(full_text)
                label = self.reference.keywords.grade_label(data.grade)
                if label:
                    data.condition = f"{data.grade}: {label}"
                return
