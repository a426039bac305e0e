"""OCR package: text extraction, normalization and pattern matching for card images."""

from .backends import OCRBackend, PassthroughBackend, TesseractBackend, load_image
from .extract import (
    LineSegmenter,
    OCRTextExtractor,
    assemble_full_text,
    combine_sides,
    text_to_extracted,
)
from .normalize import TextNormalizer
from .regexes import extract_patterns, find_cert_number, find_grade, parse_serial
from .simulate import SimulatedTextExtractor

__all__ = [
    "OCRBackend",
    "TesseractBackend",
    "PassthroughBackend",
    "load_image",
    "LineSegmenter",
    "OCRTextExtractor",
    "SimulatedTextExtractor",
    "TextNormalizer",
    "assemble_full_text",
    "combine_sides",
    "text_to_extracted",
    "extract_patterns",
    "parse_serial",
    "find_grade",
    "find_cert_number",
]
