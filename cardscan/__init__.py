"""Card Scanner - Extract trading card metadata from card images using OCR and reference data."""

__version__ = "1.0.0"
__author__ = "Card Scanner Team"
__description__ = "Turns card images into structured metadata: player, set, numbering, features and grading"

from .core.types import (
    CardFeatures,
    DetectionConfidence,
    DetectionResult,
    ExtractedCardData,
    ExtractedText,
    TextRegion,
)
from .detect import CardDetector, build_detector
from .reference.index import ReferenceIndex
from .utils.config import settings

# Core functionality imports
from .utils.log import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__description__",
    # Core components
    "configure_logging",
    "get_logger",
    "settings",
    "CardDetector",
    "build_detector",
    "ReferenceIndex",
    # Data types
    "TextRegion",
    "ExtractedText",
    "CardFeatures",
    "DetectionConfidence",
    "ExtractedCardData",
    "DetectionResult",
]
