from typing import Dict, Final, Tuple

# Region positions in reading order used when assembling full text
POSITION_ORDER: Final[Tuple[str, ...]] = ("top", "left", "middle", "right", "bottom")
FONT_SIZES: Final[Tuple[str, ...]] = ("large", "medium", "small")

BACK_OF_CARD_SEPARATOR: Final[str] = "\n\n--- BACK OF CARD ---\n\n"

# Region confidence thresholds
BRAND_REGION_MIN_CONFIDENCE: Final[float] = 0.9
GRADING_REGION_MIN_CONFIDENCE: Final[float] = 0.95
HIGH_CONFIDENCE_REGION: Final[float] = 0.9
LOW_CONFIDENCE_REGION: Final[float] = 0.7
MAX_REGION_CONFIDENCE: Final[float] = 0.98

# Completeness scoring
FIELD_SCORES: Final[Dict[str, int]] = {
    "player": 20,
    "year": 15,
    "brand": 15,
    "card_number": 10,
    "team": 8,
    "category": 5,
    "set_name": 5,
    "parallel": 3,
    "serial_number": 4,
}
IMPORTANT_FIELD_POINTS: Final[int] = 10
FEATURE_POINTS: Final[int] = 3
REGION_BONUS_POINTS: Final[int] = 2
REGION_BONUS_CAP: Final[int] = 10
MAX_MISSING_IMPORTANT: Final[int] = 2

LEVEL_HIGH: Final[int] = 80
LEVEL_MEDIUM: Final[int] = 60

# Validation
MIN_CARD_YEAR: Final[int] = 1900

OTHER_CATEGORY: Final[str] = "Other"
ROOKIE_BIAS_MIN_YEAR: Final[int] = 2001
