"""OCR engine backends that turn an image payload into raw text."""

import base64
import binascii
from pathlib import Path
from typing import Any, Optional, Protocol, Union

import cv2
import numpy as np
import pytesseract

from ..utils.config import resolve_tesseract_path, settings
from ..utils.error_handler import OCRError
from ..utils.log import LoggerMixin

ImagePayload = Union[str, bytes, Path, np.ndarray]

DATA_URL_PREFIX = "data:"


class OCRBackend(Protocol):
    """Anything that can read the text off an image payload."""

    name: str

    def extract_text(self, image: Any) -> str:
        ...


def decode_data_url(data_url: str) -> bytes:
    """Decode a base64 ``data:image/...;base64,`` URL into raw bytes."""
    try:
        header, encoded = data_url.split(",", 1)
    except ValueError as e:
        raise OCRError("Malformed data URL", details={"prefix": data_url[:32]}) from e
    if ";base64" not in header:
        raise OCRError("Only base64 data URLs are supported", details={"header": header})
    try:
        return base64.b64decode(encoded, validate=False)
    except (binascii.Error, ValueError) as e:
        raise OCRError("Invalid base64 image payload", details={"error": str(e)}) from e


def load_image(image: ImagePayload) -> np.ndarray:
    """
    Load an image payload as a BGR or grayscale array.

    Accepts an ndarray, raw encoded bytes, a base64 data URL or a file path.

    Raises:
        OCRError: If the payload cannot be decoded
    """
    if isinstance(image, np.ndarray):
        return image

    if isinstance(image, str) and image.startswith(DATA_URL_PREFIX):
        image = decode_data_url(image)

    if isinstance(image, (bytes, bytearray)):
        decoded = cv2.imdecode(np.frombuffer(bytes(image), dtype=np.uint8), cv2.IMREAD_COLOR)
        if decoded is None:
            raise OCRError("Could not decode image bytes", details={"size": len(image)})
        return decoded

    path = Path(image)
    if not path.is_file():
        raise OCRError("Image file not found", details={"path": str(path)})
    loaded = cv2.imread(str(path))
    if loaded is None:
        raise OCRError("Could not read image file", details={"path": str(path)})
    return loaded


def to_grayscale(image: np.ndarray) -> np.ndarray:
    if len(image.shape) == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    return image


class TesseractBackend(LoggerMixin):
    """Runs Tesseract through pytesseract on a grayscale copy of the image."""

    name = "tesseract"

    def __init__(
        self,
        tesseract_path: Optional[str] = None,
        language: Optional[str] = None,
        config: str = "--psm 6",
    ):
        self._configured_path = tesseract_path
        self._resolved_path: Optional[str] = None
        self.language = language or settings.OCR_LANGUAGE
        self.config = config

    @property
    def tesseract_path(self) -> str:
        """Resolved on first use so construction never needs the binary."""
        if self._resolved_path is None:
            self._resolved_path = resolve_tesseract_path(self._configured_path)
            pytesseract.pytesseract.tesseract_cmd = self._resolved_path
            self.logger.info("Tesseract resolved", tesseract_path=self._resolved_path)
        return self._resolved_path

    def extract_text(self, image: Any) -> str:
        try:
            self.tesseract_path
        except FileNotFoundError as e:
            raise OCRError(str(e)) from e

        gray = to_grayscale(load_image(image))
        try:
            text = pytesseract.image_to_string(gray, lang=self.language, config=self.config)
        except pytesseract.TesseractError as e:
            raise OCRError("Tesseract failed", details={"error": str(e)}) from e

        self.logger.debug(
            "Tesseract extraction completed",
            image_size=f"{gray.shape[1]}x{gray.shape[0]}",
            characters=len(text),
        )
        return text


class PassthroughBackend:
    """For payloads that already are recognized text (strings, UTF-8 bytes or text files)."""

    name = "passthrough"

    def extract_text(self, image: Any) -> str:
        if isinstance(image, (bytes, bytearray)):
            return bytes(image).decode("utf-8", errors="replace")
        if isinstance(image, Path):
            return image.read_text(encoding="utf-8")
        if isinstance(image, str):
            return image
        raise OCRError(
            "Passthrough backend expects text",
            details={"payload_type": type(image).__name__},
        )
