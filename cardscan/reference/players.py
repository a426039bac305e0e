"""Player and team lookup over the reference snapshot."""

import re
import unicodedata
from typing import Dict, FrozenSet, List, Optional

from rapidfuzz import fuzz, process

from ..core.types import PlayerInfo, TeamInfo
from .keywords import tokenize_words

SUFFIX_TOKENS = frozenset({"JR", "JR.", "SR", "SR.", "II", "III", "IV"})
TRAILING_SUFFIX = re.compile(r"\s+(JR\.?|SR\.?|III|II|IV)$")
TEAM_FUZZY_CUTOFF = 88
MIN_CONTAINMENT_LENGTH = 3


def fold(text: str) -> str:
    """Accent-fold, uppercase and collapse whitespace for index keys."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return " ".join(stripped.upper().split())


def strip_suffix(key: str) -> str:
    return TRAILING_SUFFIX.sub("", key).strip()


def last_name(name: str) -> Optional[str]:
    """Last token of a folded name that is not a generational suffix."""
    tokens = [t for t in fold(name).split() if t not in SUFFIX_TOKENS]
    return tokens[-1] if len(tokens) > 1 else None


class PlayerIndex:
    """Read-only player and team index.

    Player keys are full names, last names and nicknames; the first player
    registered under a last name or nickname keeps it.
    """

    def __init__(self, players_payload: Dict, teams_payload: Dict):
        self.version: str = players_payload["version"]
        self._players: List[PlayerInfo] = []
        for sport, entries in players_payload.get("players", {}).items():
            for entry in entries:
                self._players.append(PlayerInfo(
                    name=entry["name"],
                    sport=sport,
                    teams=tuple(entry.get("teams", [])),
                    years=tuple(entry.get("years", [])),
                    nicknames=tuple(entry.get("nicknames", [])),
                    position=entry.get("position"),
                    rookie_year=entry.get("rookie_year"),
                ))

        self._full_names: Dict[str, PlayerInfo] = {}
        self._keys: Dict[str, PlayerInfo] = {}
        for player in self._players:
            key = fold(player.name)
            self._full_names.setdefault(key, player)
            self._keys.setdefault(key, player)
        for player in self._players:
            surname = last_name(player.name)
            if surname:
                self._keys.setdefault(surname, player)
            for nickname in player.nicknames:
                self._keys.setdefault(fold(nickname), player)
        self._stripped_full_names = {strip_suffix(k): p for k, p in self._full_names.items()}

        self._teams: List[TeamInfo] = [
            TeamInfo(
                name=t["name"],
                sport=t["sport"],
                city=t["city"],
                abbreviations=tuple(t.get("abbreviations", [])),
            )
            for t in teams_payload.get("teams", [])
        ]
        self._team_names: Dict[str, List[TeamInfo]] = {}
        self._team_abbreviations: Dict[str, List[TeamInfo]] = {}
        for team in self._teams:
            self._team_names.setdefault(fold(team.name), []).append(team)
            self._team_names.setdefault(fold(team.full_name), []).append(team)
            for abbreviation in team.abbreviations:
                self._team_abbreviations.setdefault(fold(abbreviation), []).append(team)

    # Players

    def all_players(self) -> List[PlayerInfo]:
        return list(self._players)

    def players_for_sport(self, sport: str) -> List[PlayerInfo]:
        return [p for p in self._players if p.sport == sport]

    def is_known_player(self, text: str) -> bool:
        """Strict check: the text is exactly a full name or nickname in the index."""
        key = fold(text)
        return key in self._full_names or any(
            key == fold(n) for p in self._players for n in p.nicknames
        )

    def find_player(self, name: str, fuzzy: bool = True) -> Optional[PlayerInfo]:
        """
        Look up a player by name.

        Tries the exact key, then the last word of a multi-word query, then
        (when fuzzy) containment against suffix-stripped full names ranked by
        similarity.
        """
        if not name or not name.strip():
            return None
        key = fold(name)

        if key in self._keys:
            return self._keys[key]

        words = key.split()
        if len(words) > 1 and words[-1] in self._keys:
            return self._keys[words[-1]]

        if not fuzzy:
            return None
        return self._fuzzy_player(key)

    def _fuzzy_player(self, key: str) -> Optional[PlayerInfo]:
        query = strip_suffix(key)
        best: Optional[PlayerInfo] = None
        best_score = -1.0
        for candidate, player in self._stripped_full_names.items():
            shorter = min(len(query), len(candidate))
            if shorter < MIN_CONTAINMENT_LENGTH:
                continue
            padded_query, padded_candidate = f" {query} ", f" {candidate} "
            if padded_query in padded_candidate or padded_candidate in padded_query:
                score = fuzz.ratio(query, candidate)
                if score > best_score:
                    best, best_score = player, score
        return best

    def is_rookie_year(self, name: str, year) -> bool:
        """Whether year is the player's rookie card year (or first active year)."""
        player = self.find_player(name)
        if not player:
            return False
        rookie_year = player.rookie_year
        if rookie_year is None and player.years:
            rookie_year = player.years[0].split("-")[0]
        return rookie_year is not None and str(rookie_year) == str(year)

    # Teams

    def find_team(self, name: str, sport: Optional[str] = None) -> Optional[TeamInfo]:
        """
        Look up a team by name, abbreviation or "City Name".

        Falls back to trailing word groups of the query and then to a fuzzy
        match over team names.
        """
        if not name or not name.strip():
            return None
        key = fold(re.sub(r"[^\w\s.&'-]", " ", name))
        if not key:
            return None

        for table in (self._team_names, self._team_abbreviations):
            if key in table:
                return self._prefer_sport(table[key], sport)

        words = key.split()
        for start in range(1, len(words)):
            group = " ".join(words[start:])
            if group in self._team_names:
                return self._prefer_sport(self._team_names[group], sport)

        match = process.extractOne(
            key, list(self._team_names), scorer=fuzz.ratio, score_cutoff=TEAM_FUZZY_CUTOFF
        )
        if match:
            return self._prefer_sport(self._team_names[match[0]], sport)
        return None

    @staticmethod
    def _prefer_sport(teams: List[TeamInfo], sport: Optional[str]) -> TeamInfo:
        if sport:
            for team in teams:
                if team.sport == sport:
                    return team
        return teams[0]

    def validate_player_team(self, player_name: str, team_name: str) -> bool:
        """Whether the player ever played for the team."""
        player = self.find_player(player_name)
        if not player:
            return False
        team = self.find_team(team_name, sport=player.sport)
        canonical = team.name if team else team_name.strip()
        return any(fold(t) == fold(canonical) for t in player.teams)

    def vocabulary(self) -> FrozenSet[str]:
        """Every word of every player and team name, accent-folded."""
        words = set()
        for player in self._players:
            words.update(tokenize_words(fold(player.name)))
        for team in self._teams:
            words.update(tokenize_words(fold(team.full_name)))
        return frozenset(words)
