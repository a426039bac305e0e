"""Manufacturer licensing rules by sport and year."""

import random
from typing import Dict, List, Optional, Tuple

from ..core.constants import ROOKIE_BIAS_MIN_YEAR
from ..core.types import ManufacturerEra, ManufacturerInfo, SportLicense
from .keywords import word_pattern

ROOKIE_BIAS_SPORT = "Baseball"
ROOKIE_BIAS_MANUFACTURER = "Bowman"
MULTI_SPORT = "Multi-Sport"


def _parse_era_years(years: str) -> Tuple[int, int]:
    start, end = years.split("-")
    return int(start), int(end)


class ManufacturerRegistry:
    """Answers which manufacturers could have produced a card for a sport and year."""

    def __init__(self, payload: Dict):
        self.version: str = payload["version"]
        self._manufacturers: Dict[str, ManufacturerInfo] = {}
        for entry in payload.get("manufacturers", []):
            licenses = tuple(
                SportLicense(
                    sport=lic["sport"],
                    start_year=int(lic["start_year"]),
                    end_year=lic.get("end_year"),
                    exclusive=bool(lic.get("exclusive", False)),
                    major_sets=tuple(lic.get("major_sets", [])),
                )
                for lic in entry.get("licenses", [])
            )
            self._manufacturers[entry["name"]] = ManufacturerInfo(
                name=entry["name"],
                founded_year=int(entry["founded_year"]),
                licenses=licenses,
                defunct_year=entry.get("defunct_year"),
            )
        self._by_upper = {name.upper(): name for name in self._manufacturers}
        self._name_patterns = [(name, word_pattern([name])) for name in self._manufacturers]

        self._eras: Dict[str, List[ManufacturerEra]] = {}
        for sport, eras in payload.get("eras", {}).items():
            for era in eras:
                start, end = _parse_era_years(era["years"])
                self._eras.setdefault(sport, []).append(ManufacturerEra(
                    sport=sport,
                    start_year=start,
                    end_year=end,
                    primary=tuple(era.get("primary", [])),
                    secondary=tuple(era.get("secondary", [])),
                ))

        self._set_patterns: Dict[str, List[Tuple[str, Tuple[str, ...]]]] = {
            manufacturer: [(p["sport"], tuple(p["keywords"])) for p in patterns]
            for manufacturer, patterns in payload.get("card_set_patterns", {}).items()
        }

    def get_manufacturer(self, name: str) -> Optional[ManufacturerInfo]:
        canonical = self._by_upper.get(name.strip().upper()) if name else None
        return self._manufacturers.get(canonical) if canonical else None

    def manufacturers(self) -> List[ManufacturerInfo]:
        return list(self._manufacturers.values())

    def sports(self) -> List[str]:
        """Every sport that appears in a license or an era table."""
        seen = {}
        for info in self._manufacturers.values():
            for license in info.licenses:
                seen.setdefault(license.sport, None)
        for sport in self._eras:
            seen.setdefault(sport, None)
        return list(seen)

    def licenses_for(self, sport: str, year: int) -> List[Tuple[ManufacturerInfo, SportLicense]]:
        out = []
        for info in self._manufacturers.values():
            license = info.license_for(sport, year)
            if license:
                out.append((info, license))
        return out

    def get_valid_manufacturers(self, sport: str, year: int) -> List[str]:
        """Manufacturers holding a license for the sport in that year, in registry order."""
        return [info.name for info, _ in self.licenses_for(sport, year)]

    def get_era(self, sport: str, year: int) -> Optional[ManufacturerEra]:
        for era in self._eras.get(sport, []):
            if era.covers(year):
                return era
        return None

    def get_dominant_manufacturer(
        self, sport: str, year: int, rng: Optional[random.Random] = None
    ) -> Optional[str]:
        """
        The era's primary manufacturer that actually holds a license.

        Without an rng the first licensed primary wins; with one, the choice is
        made among the licensed primaries. Falls back to the first valid
        manufacturer when the era table has none.
        """
        valid = self.get_valid_manufacturers(sport, year)
        era = self.get_era(sport, year)
        primaries = [m for m in era.primary if m in valid] if era else []
        if primaries:
            return rng.choice(primaries) if rng else primaries[0]
        return valid[0] if valid else None

    def has_exclusive_rights(self, manufacturer: str, sport: str, year: int) -> bool:
        info = self.get_manufacturer(manufacturer)
        if not info:
            return False
        license = info.license_for(sport, year)
        return bool(license and license.exclusive)

    def exclusive_manufacturer(self, sport: str, year: int) -> Optional[str]:
        for name in self.get_valid_manufacturers(sport, year):
            if self.has_exclusive_rights(name, sport, year):
                return name
        return None

    def set_licensee(self, set_name: str, sport: str, year: int) -> Optional[str]:
        """Licensed manufacturer listing set_name among its major sets, e.g. Panini for Donruss."""
        wanted = set_name.strip().upper()
        for info, license in self.licenses_for(sport, year):
            if any(s.upper() == wanted for s in license.major_sets):
                return info.name
        return None

    def get_card_sets(self, manufacturer: str, sport: str, year: int) -> List[str]:
        info = self.get_manufacturer(manufacturer)
        if not info:
            return []
        license = info.license_for(sport, year)
        return list(license.major_sets) if license else []

    def validate_manufacturer(self, manufacturer: str, sport: str, year: int) -> bool:
        """Case-insensitive license check."""
        info = self.get_manufacturer(manufacturer)
        return bool(info and info.license_for(sport, year))

    def realistic_manufacturer(
        self,
        sport: str,
        year: int,
        is_rookie: bool = False,
        rng: Optional[random.Random] = None,
    ) -> Optional[Tuple[str, str]]:
        """
        Pick a (manufacturer, set) pair that plausibly produced a card.

        Baseball rookies from 2001 on go to Bowman whenever Bowman is licensed.
        Otherwise a manufacturer holding exclusive rights wins, then the
        dominant manufacturer for the era. Sets are taken in listed order
        unless an rng is supplied. Returns None when nobody holds a license
        for the sport and year.
        """
        manufacturer = None
        if (
            sport == ROOKIE_BIAS_SPORT
            and is_rookie
            and year >= ROOKIE_BIAS_MIN_YEAR
            and self.validate_manufacturer(ROOKIE_BIAS_MANUFACTURER, sport, year)
        ):
            manufacturer = ROOKIE_BIAS_MANUFACTURER
        else:
            manufacturer = self.exclusive_manufacturer(sport, year) or self.get_dominant_manufacturer(
                sport, year, rng
            )

        if manufacturer is None:
            return None

        sets = self.get_card_sets(manufacturer, sport, year)
        if not sets:
            return manufacturer, manufacturer
        return manufacturer, (rng.choice(sets) if rng else sets[0])

    def manufacturers_in(self, text: str) -> List[str]:
        """Registry manufacturers named as whole words in text, in order of appearance."""
        upper = text.upper()
        found = []
        for name, pattern in self._name_patterns:
            match = pattern.search(upper)
            if match:
                found.append((match.start(), name))
        return [name for _, name in sorted(found)]

    def sport_from_brand(self, brand: str, text: str) -> Optional[str]:
        """Infer the sport from a brand's card-set keywords appearing in text."""
        upper = text.upper()
        for manufacturer in self.manufacturers_in(brand):
            for sport, keywords in self._set_patterns.get(manufacturer, []):
                if sport != MULTI_SPORT and word_pattern(keywords).search(upper):
                    return sport
        return None

    @staticmethod
    def format_set(manufacturer: str, set_name: str) -> str:
        """Qualify a set name with its manufacturer, e.g. ("Panini", "Prizm") -> "Panini Prizm"."""
        if set_name.upper().startswith(manufacturer.upper()):
            return set_name
        return f"{manufacturer} {set_name}"
