"""Scoring package: feature flags, confidence and validation."""

from .confidence import ConfidenceScorer, level_for
from .features import FeatureDetector
from .validate import Validator

__all__ = ["ConfidenceScorer", "FeatureDetector", "Validator", "level_for"]
