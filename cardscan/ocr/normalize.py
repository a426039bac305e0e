"""Text normalization and context-aware OCR look-alike correction."""

import re
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

QUOTE_DOUBLE = re.compile(r'[“”„‟″«»]')
QUOTE_SINGLE = re.compile(r'[‘’‚‛′`´]')
DASHES = re.compile(r'[‐‑‒–—―−]')

TOKEN = re.compile(r'\S+')
WORD = re.compile(r'[A-Za-z]+')
NUMERIC_PUNCTUATION = frozenset('/.,-#')
LOWERCASE_II = re.compile(r'(?<=[a-z])II|II(?=[a-z])')


def normalize_punctuation(text: str) -> str:
    """Map quote variants to '"' or "'" and dash variants to '-'."""
    text = QUOTE_DOUBLE.sub('"', text)
    text = QUOTE_SINGLE.sub("'", text)
    return DASHES.sub('-', text)


class TextNormalizer:
    """
    Cleans recognized text and repairs look-alike character confusions.

    Corrections depend on context: letters inside numeric tokens become
    digits, digits between letters become letters, and sequence swaps
    (rn/m, ll/II, vv/w) are only kept when they turn an unknown word into a
    vocabulary word.
    """

    def __init__(self, confusions: Optional[Dict] = None, vocabulary: Iterable[str] = ()):
        confusions = confusions or {}
        self.digit_lookalikes: Dict[str, str] = dict(confusions.get('digit_lookalikes', {}))
        self.letter_lookalikes: Dict[str, str] = dict(confusions.get('letter_lookalikes', {}))
        self.lowercase_lookalikes: Dict[str, str] = dict(confusions.get('lowercase_lookalikes', {}))
        self.sequence_swaps: List[Tuple[str, str]] = [tuple(p) for p in confusions.get('sequence_swaps', [])]
        self.vocabulary: FrozenSet[str] = frozenset(w.upper() for w in vocabulary)

        digits_between = ''.join(re.escape(d) for d in self.letter_lookalikes)
        self._digits_between_letters = (
            re.compile(rf'(?<=[A-Za-z])[{digits_between}]+(?=[A-Za-z])') if digits_between else None
        )

    @classmethod
    def from_reference(cls, reference) -> "TextNormalizer":
        return cls(reference.keywords.confusions, reference.vocabulary)

    def clean_text(self, text: str) -> str:
        """Normalize punctuation, correct confusions and collapse all whitespace."""
        corrected, _ = self.correct(normalize_punctuation(text))
        return ' '.join(corrected.split())

    def normalize_line(self, line: str) -> str:
        """Like clean_text for a single line: collapses runs of spaces only."""
        return self.normalize_line_counted(line)[0]

    def normalize_line_counted(self, line: str) -> Tuple[str, int]:
        corrected, count = self.correct(normalize_punctuation(line))
        return re.sub(r'[ \t]+', ' ', corrected).strip(), count

    def correct(self, text: str) -> Tuple[str, int]:
        """Apply every context rule; returns the text and the number of corrections."""
        total = 0

        def fix_token(match: re.Match) -> str:
            nonlocal total
            token = match.group(0)
            fixed, count = self._fix_numeric_token(token)
            if not count:
                fixed, count = self._fix_alpha_token(token)
            total += count
            return fixed

        text = TOKEN.sub(fix_token, text)

        text, count = LOWERCASE_II.subn('ll', text)
        total += count

        def fix_word(match: re.Match) -> str:
            nonlocal total
            word = match.group(0)
            swapped = self._swap_to_vocabulary(word)
            if swapped != word:
                total += 1
            return swapped

        if self.vocabulary and self.sequence_swaps:
            text = WORD.sub(fix_word, text)

        return text, total

    def _fix_numeric_token(self, token: str) -> Tuple[str, int]:
        """Letters in a mostly-digit token become digits ("15O/25O" -> "150/250")."""
        digits = sum(1 for c in token if c.isdigit())
        letters = sum(1 for c in token if c in self.digit_lookalikes)
        if digits < 2 or not letters or letters >= digits:
            return token, 0
        # Leading letter codes such as "B12" are card numbers, not misread digits
        if token.lstrip('#')[:1].isalpha() and '/' not in token:
            return token, 0
        if any(not (c.isdigit() or c in self.digit_lookalikes or c in NUMERIC_PUNCTUATION) for c in token):
            return token, 0
        return ''.join(self.digit_lookalikes.get(c, c) for c in token), letters

    def _fix_alpha_token(self, token: str) -> Tuple[str, int]:
        """Digits between letters become letters ("T0PPS" -> "TOPPS")."""
        if self._digits_between_letters is None:
            return token, 0
        count = 0

        def replace(match: re.Match) -> str:
            nonlocal count
            previous = token[match.start() - 1]
            table = self.lowercase_lookalikes if previous.islower() else self.letter_lookalikes
            count += len(match.group(0))
            return ''.join(table.get(c, c) for c in match.group(0))

        fixed = self._digits_between_letters.sub(replace, token)
        return fixed, count

    def _swap_to_vocabulary(self, word: str) -> str:
        if word.upper() in self.vocabulary:
            return word
        for a, b in self.sequence_swaps:
            for old, new in ((a, b), (b, a), (a.upper(), b.upper()), (b.upper(), a.upper())):
                if old in word:
                    candidate = word.replace(old, new)
                    if candidate.upper() in self.vocabulary:
                        return candidate
        return word
