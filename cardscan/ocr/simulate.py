"""Simulated OCR: realistic card text generated from the reference data."""

import hashlib
import random
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

import numpy as np

from ..core.types import ExtractedText, PlayerInfo
from ..utils.log import LoggerMixin
from .extract import LineSegmenter, text_to_extracted

TEMPLATE_WEIGHTS = (
    ("modern", 30),
    ("vintage", 15),
    ("graded", 20),
    ("autograph", 10),
    ("pokemon", 5),
    ("rookie", 10),
    ("parallel", 5),
    ("relic", 5),
)
NOISE_PROBABILITY = 0.1
VINTAGE_CUTOFF_YEAR = 2000
POKEMON = "Pokemon"
GRADERS = ("PSA", "BGS", "SGC", "CGC")
GRADES = ("10", "9.5", "9", "8.5", "8", "7")
PRINT_RUNS = (5, 10, 25, 50, 75, 99, 150, 199, 250, 299, 499)
RELIC_LINES = ("GAME-USED JERSEY", "GAME-WORN PATCH", "MEMORABILIA RELIC", "PRIME SWATCH")
AUTOGRAPH_LINES = ("CERTIFIED AUTOGRAPH", "ON-CARD AUTO", "SIGNATURE SERIES")
ROOKIE_LINES = ("ROOKIE", "RC", "RATED ROOKIE", "1ST BOWMAN")


@dataclass
class CardTemplate:
    kind: str
    front_lines: List[str] = field(default_factory=list)
    back_lines: List[str] = field(default_factory=list)


def payload_digest(payload: Any) -> str:
    """Stable digest of an image payload, used to seed per-call randomness."""
    if payload is None:
        data = b""
    elif isinstance(payload, np.ndarray):
        data = payload.tobytes()
    elif isinstance(payload, (bytes, bytearray)):
        data = bytes(payload)
    else:
        data = str(payload).encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def _year_range(player: PlayerInfo) -> Tuple[int, int]:
    first = player.years[0] if player.years else "2020-2024"
    start, _, end = first.partition("-")
    return int(start), int(end or start)


class SimulatedTextExtractor(LoggerMixin):
    """
    Generates plausible recognized text instead of reading the image.

    Each call draws from its own ``random.Random`` seeded with the configured
    seed and a digest of the payload, so the same image and seed always give
    the same card. Front and back of one card come from the same template.
    """

    name = "simulated"

    def __init__(self, reference, segmenter: Optional[LineSegmenter] = None, seed: int = 0):
        self.reference = reference
        self.segmenter = segmenter or LineSegmenter(reference)
        self.seed = seed

    def _rng(self, *payloads: Any) -> random.Random:
        digest = ":".join(payload_digest(p) for p in payloads)
        return random.Random(f"{self.seed}:{digest}")

    def extract_text(self, image: Any, side: str = "front") -> ExtractedText:
        rng = self._rng(image)
        template = self.build_template(rng)
        lines = template.front_lines if side == "front" else template.back_lines
        self.logger.debug("Simulated text generated", side=side, template=template.kind)
        return text_to_extracted("\n".join(self.add_noise(lines, rng)), side, self.segmenter)

    def extract_card(
        self, front: Any, back: Any = None
    ) -> Tuple[ExtractedText, Optional[ExtractedText]]:
        rng = self._rng(front, back)
        template = self.build_template(rng)
        front_text = text_to_extracted(
            "\n".join(self.add_noise(template.front_lines, rng)), "front", self.segmenter
        )
        back_text = None
        if back is not None:
            back_text = text_to_extracted(
                "\n".join(self.add_noise(template.back_lines, rng)), "back", self.segmenter
            )
        self.logger.debug("Simulated card generated", template=template.kind, has_back=back is not None)
        return front_text, back_text

    # Templates

    def build_template(self, rng: random.Random) -> CardTemplate:
        names = [name for name, _ in TEMPLATE_WEIGHTS]
        weights = [weight for _, weight in TEMPLATE_WEIGHTS]
        kind = rng.choices(names, weights=weights)[0]
        if kind == "pokemon":
            return self._pokemon_template(rng)
        return self._sports_template(kind, rng)

    def _pick_player(self, kind: str, rng: random.Random) -> PlayerInfo:
        players = [p for p in self.reference.players.all_players() if p.sport != POKEMON]
        if kind == "vintage":
            vintage = [p for p in players if _year_range(p)[0] < VINTAGE_CUTOFF_YEAR]
            players = vintage or players
        elif kind == "rookie":
            rookies = [p for p in players if p.rookie_year]
            players = rookies or players
        return rng.choice(players)

    def _pick_year(self, kind: str, player: PlayerInfo, rng: random.Random) -> int:
        if kind == "rookie" and player.rookie_year:
            return int(player.rookie_year)
        start, end = _year_range(player)
        if kind == "vintage":
            end = min(end, VINTAGE_CUTOFF_YEAR - 1)
        return rng.randint(start, max(start, end))

    def _brand_for(self, player: PlayerInfo, year: int, is_rookie: bool, rng: random.Random) -> Tuple[str, str]:
        registry = self.reference.manufacturers
        choice = registry.realistic_manufacturer(player.sport, year, is_rookie=is_rookie, rng=rng)
        if choice:
            return choice
        era = registry.get_era(player.sport, year)
        manufacturer = era.primary[0] if era and era.primary else "Topps"
        return manufacturer, manufacturer

    def _sports_template(self, kind: str, rng: random.Random) -> CardTemplate:
        player = self._pick_player(kind, rng)
        year = self._pick_year(kind, player, rng)
        is_rookie = kind == "rookie"
        manufacturer, set_name = self._brand_for(player, year, is_rookie, rng)
        brand = self.reference.manufacturers.format_set(manufacturer, set_name)

        team = self.reference.players.find_team(player.primary_team or "", sport=player.sport)
        team_line = team.full_name if team else (player.primary_team or "")
        number = rng.randint(1, 350)
        card_number = f"#{number}"

        front = []
        if kind == "graded":
            grader = rng.choice(GRADERS)
            front.append(f"{grader} {rng.choice(GRADES)}")
            front.append(f"Cert #{rng.randint(10_000_000, 99_999_999)}")
        front.append(f"{year} {brand}")
        front.append(player.name.upper())
        if team_line:
            front.append(team_line)
        if kind == "rookie":
            front.append(rng.choice(ROOKIE_LINES))
            initials = "".join(part[0] for part in player.name.split()[:2]).upper()
            card_number = f"#{initials}-{number % 100 or 1}"
        if kind == "autograph":
            front.append(rng.choice(AUTOGRAPH_LINES))
        if kind == "relic":
            front.append(rng.choice(RELIC_LINES))
        if kind == "parallel":
            front.append(rng.choice(self.reference.keywords.groups["parallels"]))
        if kind in ("parallel", "autograph"):
            print_run = rng.choice(PRINT_RUNS)
            front.append(f"{rng.randint(1, print_run)}/{print_run}")
        front.append(card_number)

        back = [
            player.name,
            f"Card {card_number}",
            self._stats_line(player, rng),
        ]
        if player.position:
            back.append(f"Position: {player.position}")
        back.append(f"© {year} {manufacturer}")
        return CardTemplate(kind=kind, front_lines=front, back_lines=back)

    def _pokemon_template(self, rng: random.Random) -> CardTemplate:
        candidates = self.reference.players.players_for_sport(POKEMON)
        name = rng.choice(candidates).name if candidates else "Pikachu"
        year = rng.randint(1999, 2024)
        total = rng.choice((102, 165, 185, 198, 203))
        number = rng.randint(1, total)
        hp = rng.choice((60, 90, 120, 170, 330))
        front = [f"{year} Pokémon", name, f"HP {hp}", "Basic Pokémon", f"{number}/{total}"]
        back = ["Pokémon Trainer", f"Energy {rng.randint(1, 4)}", f"©{year} Pokémon"]
        return CardTemplate(kind="pokemon", front_lines=front, back_lines=back)

    @staticmethod
    def _stats_line(player: PlayerInfo, rng: random.Random) -> str:
        if player.sport == "Baseball":
            return f".{rng.randint(230, 340)} AVG {rng.randint(5, 55)} HR {rng.randint(30, 140)} RBI"
        if player.sport == "Basketball":
            return (
                f"{rng.uniform(8, 35):.1f} PPG {rng.uniform(2, 14):.1f} RPG "
                f"{rng.uniform(1, 11):.1f} APG"
            )
        if player.sport == "Football":
            return f"{rng.randint(2, 50)} TD {rng.randint(300, 5500)} YDS"
        if player.sport == "Hockey":
            goals, assists = rng.randint(5, 70), rng.randint(5, 90)
            return f"{goals} G {assists} A {goals + assists} PTS"
        return ""

    # Noise

    def add_noise(self, lines: List[str], rng: random.Random) -> List[str]:
        """Each line has a 10% chance of one OCR-style error."""
        lookalikes = self.reference.keywords.confusions.get("letter_lookalikes", {})
        out: List[str] = []
        i = 0
        while i < len(lines):
            line = lines[i]
            if line and rng.random() < NOISE_PROBABILITY:
                kind = rng.choice(("lookalike", "space", "merge", "case"))
                if kind == "merge" and i + 1 < len(lines):
                    out.append(f"{line} {lines[i + 1]}")
                    i += 2
                    continue
                line = self._corrupt(line, kind, lookalikes, rng)
            out.append(line)
            i += 1
        return [line for line in out if line]

    @staticmethod
    def _corrupt(line: str, kind: str, lookalikes: dict, rng: random.Random) -> str:
        position = rng.randrange(len(line))
        if kind == "lookalike":
            reverse = {letter: digit for digit, letter in lookalikes.items()}
            candidates = [i for i, c in enumerate(line) if c in lookalikes or c in reverse]
            if not candidates:
                return line
            position = rng.choice(candidates)
            char = line[position]
            swapped = lookalikes.get(char) or reverse[char]
            return line[:position] + swapped + line[position + 1:]
        if kind == "space":
            return line[:position] + " " + line[position:]
        if kind == "case":
            return line[:position] + line[position].swapcase() + line[position + 1:]
        return line
