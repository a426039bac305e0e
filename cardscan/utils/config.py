"""Configuration and settings management."""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator
from pathlib import Path
import shutil


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # OCR settings
    USE_REAL_OCR: bool = False
    TESSERACT_PATH: Optional[str] = None
    OCR_LANGUAGE: str = "eng"
    OCR_TIMEOUT_SECONDS: float = 15.0

    # Simulation
    SIMULATION_SEED: int = 0

    # Reference data
    REFERENCE_DATA_DIR: Optional[str] = None

    @field_validator('TESSERACT_PATH', 'REFERENCE_DATA_DIR', mode='before')
    @classmethod
    def validate_optional_path(cls, v):
        """Convert empty/whitespace strings to None."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        """Convert empty/whitespace strings to default."""
        if isinstance(v, str) and not v.strip():
            return "INFO"
        return v

    @field_validator('LOG_FORMAT', mode='before')
    @classmethod
    def validate_log_format(cls, v):
        """Convert empty/whitespace strings to default and reject unknown renderers."""
        if isinstance(v, str) and not v.strip():
            return "json"
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in ("json", "console"):
                raise ValueError(f"LOG_FORMAT must be 'json' or 'console', got {v!r}")
        return v

    @field_validator('OCR_LANGUAGE', mode='before')
    @classmethod
    def validate_ocr_language(cls, v):
        """Convert empty/whitespace strings to default."""
        if isinstance(v, str) and not v.strip():
            return "eng"
        return v

    @field_validator('OCR_TIMEOUT_SECONDS', mode='before')
    @classmethod
    def validate_ocr_timeout(cls, v):
        """Blank falls back to the default; the timeout must be positive."""
        if isinstance(v, str) and not v.strip():
            return 15.0
        if float(v) <= 0:
            raise ValueError("OCR_TIMEOUT_SECONDS must be positive")
        return v

    @field_validator('SIMULATION_SEED', 'USE_REAL_OCR', mode='before')
    @classmethod
    def validate_blank_flags(cls, v, info):
        """Convert empty/whitespace strings to the field default."""
        if isinstance(v, str) and not v.strip():
            return cls.model_fields[info.field_name].default
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }


# Global settings instance
settings = Settings()


def resolve_tesseract_path(configured: Optional[str] = None) -> str:
    """Get Tesseract path, with fallback to common locations."""
    configured = configured if configured is not None else settings.TESSERACT_PATH
    if configured and Path(configured).exists():
        return configured

    # Try to find tesseract in PATH
    tesseract_path = shutil.which("tesseract")
    if tesseract_path:
        return tesseract_path

    common_paths = [
        "/opt/homebrew/bin/tesseract",  # Apple Silicon Homebrew
        "/usr/local/bin/tesseract",     # Intel Homebrew
        "/usr/bin/tesseract",           # System package
    ]

    for path in common_paths:
        if Path(path).exists():
            return path

    raise FileNotFoundError(
        "Tesseract not found. Install it (apt install tesseract-ocr / brew install tesseract) "
        "or set TESSERACT_PATH"
    )
