"""Card detection pipeline: text extraction through scoring and validation."""

import time
from typing import Any, Optional

from .core.types import CardFeatures, DetectionResult, ExtractedCardData, ExtractedText
from .ocr.backends import OCRBackend, TesseractBackend
from .ocr.extract import LineSegmenter, OCRTextExtractor, combine_sides, text_to_extracted
from .ocr.normalize import TextNormalizer
from .ocr.regexes import extract_patterns
from .ocr.simulate import SimulatedTextExtractor
from .reference.index import ReferenceIndex
from .resolve.fields import FieldResolver
from .score.confidence import ConfidenceScorer
from .score.features import FeatureDetector
from .score.validate import Validator
from .utils.config import Settings
from .utils.config import settings as default_settings
from .utils.error_handler import ErrorContext, safe_execute
from .utils.log import LoggerMixin, detection_scope


class CardDetector(LoggerMixin):
    """
    Public entry point: image payloads (or recognized text) in, card data out.

    Stages run in order: extraction, normalization, pattern matching, field
    resolution, feature detection, scoring and validation. A failing stage is
    logged and its defaults are used. Calls share nothing but the read-only
    reference index.
    """

    def __init__(
        self,
        reference: ReferenceIndex,
        extractor,
        segmenter: Optional[LineSegmenter] = None,
        normalizer: Optional[TextNormalizer] = None,
        current_year: Optional[int] = None,
    ):
        self.reference = reference
        self.extractor = extractor
        self.normalizer = normalizer or TextNormalizer.from_reference(reference)
        self.segmenter = segmenter or LineSegmenter(reference, self.normalizer)
        self.resolver = FieldResolver(reference, current_year=current_year)
        self.feature_detector = FeatureDetector(reference.keywords)
        self.scorer = ConfidenceScorer()
        self.validator = Validator(current_year=current_year)

    def detect(
        self, front_image: Any, back_image: Any = None, sport_hint: Optional[str] = None
    ) -> ExtractedCardData:
        with detection_scope(source="image"):
            context = self.log_start("card_detection", has_back=back_image is not None)
            front, back = self.extractor.extract_card(front_image, back_image)
            data = self._process(front, back, sport_hint)
            self.log_success(context, **self._summary(data))
        return data

    def detect_from_text(
        self, front_text: str, back_text: Optional[str] = None, sport_hint: Optional[str] = None
    ) -> ExtractedCardData:
        """Run the pipeline on text that has already been recognized."""
        with detection_scope(source="text"):
            context = self.log_start("card_detection_from_text", has_back=bool(back_text))
            front = text_to_extracted(front_text, "front", self.segmenter)
            back = text_to_extracted(back_text, "back", self.segmenter) if back_text else None
            data = self._process(front, back, sport_hint)
            self.log_success(context, **self._summary(data))
        return data

    def detect_with_timing(
        self, front_image: Any, back_image: Any = None, sport_hint: Optional[str] = None
    ) -> DetectionResult:
        start = time.time()
        try:
            data = self.detect(front_image, back_image, sport_hint)
        except Exception as e:
            elapsed = int((time.time() - start) * 1000)
            self.logger.error("Card detection failed", error=str(e), error_type=type(e).__name__)
            return DetectionResult(success=False, error=str(e), processing_time_ms=elapsed)
        elapsed = int((time.time() - start) * 1000)
        return DetectionResult(success=True, data=data, processing_time_ms=elapsed)

    def _process(
        self, front: ExtractedText, back: Optional[ExtractedText], sport_hint: Optional[str]
    ) -> ExtractedCardData:
        combined = combine_sides(front, back)
        full_text = self.normalizer.clean_text(combined)
        patterns = extract_patterns(full_text)

        data = safe_execute(
            self.resolver.resolve,
            front,
            back,
            full_text,
            patterns,
            sport_hint,
            context=ErrorContext(operation="resolve fields", module=__name__, function="resolve"),
            logger=self.logger,
        ) or ExtractedCardData()

        data.features = safe_execute(
            self.feature_detector.detect,
            full_text,
            context=ErrorContext(operation="detect features", module=__name__, function="detect"),
            logger=self.logger,
            default_return=CardFeatures(),
        )
        data.confidence = self.scorer.score(data, data.features, front.regions)
        data.raw_text = combined
        data.extraction_errors = self.validator.validate(data)
        return data

    @staticmethod
    def _summary(data: ExtractedCardData) -> dict:
        return {
            "player": data.player,
            "year": data.year,
            "brand": data.brand,
            "score": data.confidence.score if data.confidence else None,
            "errors": len(data.extraction_errors),
        }


def build_detector(
    settings: Optional[Settings] = None,
    reference: Optional[ReferenceIndex] = None,
    backend: Optional[OCRBackend] = None,
    current_year: Optional[int] = None,
) -> CardDetector:
    """
    Assemble a CardDetector from settings.

    With USE_REAL_OCR (or an explicit backend) images go through the OCR
    engine with the simulated extractor as fallback; otherwise the simulated
    extractor is used directly, seeded by SIMULATION_SEED.
    """
    settings = settings or default_settings
    reference = reference or ReferenceIndex.load(settings.REFERENCE_DATA_DIR)
    normalizer = TextNormalizer.from_reference(reference)
    segmenter = LineSegmenter(reference, normalizer)
    simulated = SimulatedTextExtractor(reference, segmenter, seed=settings.SIMULATION_SEED)

    if backend is None and settings.USE_REAL_OCR:
        backend = TesseractBackend(settings.TESSERACT_PATH, settings.OCR_LANGUAGE)

    if backend is not None:
        extractor = OCRTextExtractor(
            backend, segmenter, fallback=simulated, timeout_seconds=settings.OCR_TIMEOUT_SECONDS
        )
    else:
        extractor = simulated

    return CardDetector(
        reference, extractor, segmenter=segmenter, normalizer=normalizer, current_year=current_year
    )
