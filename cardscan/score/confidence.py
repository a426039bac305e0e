"""Completeness-based confidence score for extracted card data."""

from typing import Iterable, List

from ..core.constants import (
    FEATURE_POINTS,
    FIELD_SCORES,
    HIGH_CONFIDENCE_REGION,
    IMPORTANT_FIELD_POINTS,
    LEVEL_HIGH,
    LEVEL_MEDIUM,
    LOW_CONFIDENCE_REGION,
    MAX_MISSING_IMPORTANT,
    REGION_BONUS_CAP,
    REGION_BONUS_POINTS,
)
from ..core.types import CardFeatures, DetectionConfidence, ExtractedCardData, TextRegion

LOW_CONFIDENCE_WARNING = "Some text regions have low confidence"
MISSING_FIELDS_WARNING = "Multiple important fields missing"


def level_for(score: int) -> str:
    """high at 80 and above, medium at 60 and above, otherwise low."""
    if score >= LEVEL_HIGH:
        return "high"
    if score >= LEVEL_MEDIUM:
        return "medium"
    return "low"


class ConfidenceScorer:
    def score(
        self,
        data: ExtractedCardData,
        features: CardFeatures,
        regions: Iterable[TextRegion],
    ) -> DetectionConfidence:
        """
        Score 0-100 from field completeness, feature flags and region quality.

        Every present field adds its points; missing fields worth 10 points or
        more are listed. Each feature flag adds 3, and each front region read
        with confidence above 0.9 adds 2, up to 10.
        """
        regions = list(regions)
        total = 0
        detected = 0
        missing: List[str] = []

        for field_name, points in FIELD_SCORES.items():
            if getattr(data, field_name):
                total += points
                detected += 1
            elif points >= IMPORTANT_FIELD_POINTS:
                missing.append(field_name)

        total += features.count() * FEATURE_POINTS

        confident = sum(1 for r in regions if r.confidence > HIGH_CONFIDENCE_REGION)
        total += min(confident * REGION_BONUS_POINTS, REGION_BONUS_CAP)

        total = max(0, min(100, total))

        warnings: List[str] = []
        if any(r.confidence < LOW_CONFIDENCE_REGION for r in regions):
            warnings.append(LOW_CONFIDENCE_WARNING)
        if len(missing) > MAX_MISSING_IMPORTANT:
            warnings.append(MISSING_FIELDS_WARNING)

        return DetectionConfidence(
            score=total,
            level=level_for(total),
            detected_fields=detected,
            missing_fields=missing,
            warnings=warnings,
        )
