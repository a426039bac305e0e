"""Keyword tables used by segmentation, field resolution and feature detection."""

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Pattern, Tuple

KEYWORD_GROUPS = ("parallels", "rookie", "autograph", "relic")

_NEVER = re.compile(r"(?!x)x")


def word_pattern(keywords: Iterable[str]) -> Pattern[str]:
    """Compile a whole-word matcher for uppercased text, longest keyword first."""
    alternatives = sorted({k.upper() for k in keywords if k}, key=len, reverse=True)
    if not alternatives:
        return _NEVER
    body = "|".join(re.escape(k) for k in alternatives)
    return re.compile(rf"(?<!\w)(?:{body})(?!\w)")


def tokenize_words(text: str) -> List[str]:
    """Uppercased alphabetic words of at least two letters."""
    return [w for w in re.findall(r"[^\W\d_]+", text.upper()) if len(w) >= 2]


@dataclass(frozen=True)
class BrandKeyword:
    keyword: str
    display: str
    manufacturer: str


class KeywordTables:
    """Compiled keyword matchers built from keywords.json."""

    def __init__(self, payload: Dict):
        self.version: str = payload["version"]

        brands = []
        for manufacturer, entries in payload.get("brands", {}).items():
            for keyword, display in entries:
                brands.append(BrandKeyword(keyword.upper(), display, manufacturer))
        # Longest keyword wins, stable for equal lengths
        self.brands: Tuple[BrandKeyword, ...] = tuple(
            sorted(brands, key=lambda b: len(b.keyword), reverse=True)
        )
        self._brand_patterns = [(b, word_pattern([b.keyword])) for b in self.brands]
        self.manufacturer_names: Tuple[str, ...] = tuple(payload.get("brands", {}))

        self.sports: Dict[str, Tuple[str, ...]] = {
            sport: tuple(k.upper() for k in words) for sport, words in payload.get("sports", {}).items()
        }
        self._sport_keyword_patterns = {
            sport: [(k, word_pattern([k])) for k in words] for sport, words in self.sports.items()
        }
        self.stat_units: Dict[str, Tuple[str, ...]] = {
            sport: tuple(u.upper() for u in units) for sport, units in payload.get("stat_units", {}).items()
        }

        self.groups: Dict[str, Tuple[str, ...]] = {
            group: tuple(k.upper() for k in payload.get(group, [])) for group in KEYWORD_GROUPS
        }
        self._group_patterns: Dict[str, Pattern[str]] = {
            group: word_pattern(words) for group, words in self.groups.items()
        }

        self.confusions: Dict = payload.get("confusions", {})
        self.grading_scale: Dict[str, str] = payload.get("grading_scale", {})

        self.vocabulary: FrozenSet[str] = frozenset(self._collect_vocabulary())

    def _collect_vocabulary(self) -> Iterable[str]:
        for brand in self.brands:
            yield from tokenize_words(brand.keyword)
            yield from tokenize_words(brand.display)
        for words in list(self.sports.values()) + list(self.groups.values()) + list(self.stat_units.values()):
            for word in words:
                yield from tokenize_words(word)
        for label in self.grading_scale.values():
            yield from tokenize_words(label)

    def match_brand(self, text: str) -> Optional[BrandKeyword]:
        """Return the longest brand keyword found as a whole word in text."""
        upper = text.upper()
        for brand, pattern in self._brand_patterns:
            if pattern.search(upper):
                return brand
        return None

    def find(self, group: str, text: str) -> Optional[str]:
        """Return the first (longest) keyword of a group found in text."""
        match = self._group_patterns[group].search(text.upper())
        return match.group(0) if match else None

    def has(self, group: str, text: str) -> bool:
        return self.find(group, text) is not None

    def sport_hits(self, text: str) -> Dict[str, int]:
        """Count distinct sport keywords per sport found in text."""
        upper = text.upper()
        hits = {}
        for sport, patterns in self._sport_keyword_patterns.items():
            count = sum(1 for _, pattern in patterns if pattern.search(upper))
            if count:
                hits[sport] = count
        return hits

    def grade_label(self, grade: str) -> Optional[str]:
        """Condition label for a numeric grade, e.g. "10" -> "GEM MINT"."""
        try:
            value = float(grade)
        except (TypeError, ValueError):
            return None
        key = f"{value:g}"
        return self.grading_scale.get(key)
