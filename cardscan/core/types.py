from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class TextRegion:
    text: str
    confidence: float
    position: str  # top | middle | bottom | left | right
    font_size: Optional[str] = None  # large | medium | small
    is_bold: bool = False


@dataclass(frozen=True)
class ExtractedText:
    regions: Tuple[TextRegion, ...]
    full_text: str
    language: str = "en"
    orientation: int = 0

    @classmethod
    def empty(cls) -> "ExtractedText":
        return cls(regions=(), full_text="")

    def by_position(self, position: str) -> List[TextRegion]:
        return [r for r in self.regions if r.position == position]


@dataclass(frozen=True)
class PlayerInfo:
    name: str
    sport: str
    teams: Tuple[str, ...]
    years: Tuple[str, ...]
    nicknames: Tuple[str, ...] = ()
    position: Optional[str] = None
    rookie_year: Optional[str] = None

    @property
    def primary_team(self) -> Optional[str]:
        return self.teams[0] if self.teams else None


@dataclass(frozen=True)
class TeamInfo:
    name: str
    sport: str
    city: str
    abbreviations: Tuple[str, ...] = ()

    @property
    def full_name(self) -> str:
        return f"{self.city} {self.name}"


@dataclass(frozen=True)
class SportLicense:
    sport: str
    start_year: int
    end_year: Optional[int] = None
    exclusive: bool = False
    major_sets: Tuple[str, ...] = ()

    def covers(self, year: int) -> bool:
        """Inclusive on both ends; an open end means the license is current."""
        return year >= self.start_year and (self.end_year is None or year <= self.end_year)


@dataclass(frozen=True)
class ManufacturerInfo:
    name: str
    founded_year: int
    licenses: Tuple[SportLicense, ...]
    defunct_year: Optional[int] = None

    def license_for(self, sport: str, year: int) -> Optional[SportLicense]:
        for license in self.licenses:
            if license.sport == sport and license.covers(year):
                return license
        return None


@dataclass(frozen=True)
class ManufacturerEra:
    sport: str
    start_year: int
    end_year: int
    primary: Tuple[str, ...]
    secondary: Tuple[str, ...] = ()

    def covers(self, year: int) -> bool:
        return self.start_year <= year <= self.end_year


@dataclass
class CardFeatures:
    is_rookie: bool = False
    is_autograph: bool = False
    is_relic: bool = False
    is_numbered: bool = False
    is_graded: bool = False
    is_parallel: bool = False
    is_insert: bool = False
    is_short_print: bool = False
    is_variation: bool = False
    is_one_of_one: bool = False

    def count(self) -> int:
        """Number of flags that are set."""
        return sum(1 for f in fields(self) if getattr(self, f.name))


@dataclass
class DetectionConfidence:
    score: int
    level: str  # high | medium | low
    detected_fields: int
    missing_fields: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class ExtractedCardData:
    """Structured card metadata produced by one detection call."""

    # Basic information
    player: Optional[str] = None
    year: Optional[str] = None
    brand: Optional[str] = None
    set_name: Optional[str] = None
    card_number: Optional[str] = None
    team: Optional[str] = None
    category: Optional[str] = None

    # Card details
    parallel: Optional[str] = None
    variation: Optional[str] = None
    serial_number: Optional[str] = None
    print_run: Optional[int] = None

    # Condition and grading
    condition: Optional[str] = None
    grading_company: Optional[str] = None
    grade: Optional[str] = None
    cert_number: Optional[str] = None

    features: CardFeatures = field(default_factory=CardFeatures)
    confidence: Optional[DetectionConfidence] = None
    raw_text: str = ""
    extraction_errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready mapping with unset fields left out."""
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class DetectionResult:
    success: bool
    data: Optional[ExtractedCardData] = None
    error: Optional[str] = None
    processing_time_ms: Optional[int] = None
