"""
Centralized error handling for the card metadata pipeline.

Pipeline stages never abort a detection: recoverable failures are logged
through `handle_error` and the stage falls back to its defaults. Configuration
and reference data problems are raised at construction time instead.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import structlog


class CardScanError(Exception):
    """Base exception class for all cardscan errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(CardScanError):
    """Raised when there are configuration or environment variable issues."""
    pass


class OCRError(CardScanError):
    """Raised when an OCR backend fails or cannot read the image payload."""
    pass


class ReferenceDataError(CardScanError):
    """Raised when a reference data file is missing or malformed."""
    pass


@dataclass
class ErrorContext:
    """Where a pipeline failure happened, e.g. the "resolve team" step."""
    operation: str
    module: str
    function: str
    input_data: Optional[Dict[str, Any]] = None

    @property
    def location(self) -> str:
        return f"{self.module}.{self.function}"


def handle_error(
    error: Exception,
    context: ErrorContext,
    logger: structlog.stdlib.BoundLogger,
    reraise: bool = True,
    default_return: Any = None
) -> Any:
    """
    Log a failure as one structured record, then re-raise or return a default.

    The record's event reads "Error in <module>.<function> during
    <operation>: <message>" and carries the error type, operation, location
    and any CardScanError details as separate fields. Timestamps and the
    detection id come from the logging processors.
    """
    message = error.message if isinstance(error, CardScanError) else str(error)
    details = error.details if isinstance(error, CardScanError) else {}

    event = f"Error in {context.location} during {context.operation}: {message}"
    if details:
        event += f" | Details: {details}"

    logger.error(
        event,
        error_type=type(error).__name__,
        operation=context.operation,
        error_module=context.module,
        error_function=context.function,
        input_data=context.input_data,
        details=details or None,
        exc_info=True,
    )

    if reraise:
        raise error

    return default_return


def safe_execute(
    func,
    *args,
    context: ErrorContext,
    logger: structlog.stdlib.BoundLogger,
    default_return: Any = None,
    **kwargs
) -> Any:
    """Run one pipeline stage; a failure is logged and default_return stands in for its result."""
    try:
        return func(*args, **kwargs)
    except Exception as e:
        return handle_error(e, context, logger, reraise=False, default_return=default_return)


def validate_required_fields(data: Dict[str, Any], required_fields: List[str], context: ErrorContext) -> None:
    """
    Check that a reference data payload carries every required top-level key.

    Raises:
        ReferenceDataError: naming the missing keys and the data file being loaded
    """
    missing_fields = [field for field in required_fields if data.get(field) is None]

    if missing_fields:
        raise ReferenceDataError(
            f"Missing required fields: {missing_fields}",
            details={
                "missing_fields": missing_fields,
                "available_fields": list(data.keys()),
                "operation": context.operation
            }
        )
