"""
Input validation utilities for the card metadata pipeline.

These guard the outer edges (CLI arguments, data directories, image sides)
so that bad input is reported as a ConfigurationError before any stage runs.
"""

from typing import Any, List, Optional, Union
from pathlib import Path

from .error_handler import ConfigurationError


def validate_file_path(file_path: Union[str, Path], must_exist: bool = False) -> Path:
    """
    Validate and normalize a file path.

    Args:
        file_path: File path to validate
        must_exist: Whether the file must already exist

    Returns:
        Normalized Path object

    Raises:
        ConfigurationError: If path is invalid or file doesn't exist when required
    """
    try:
        path = Path(file_path)

        if must_exist and not path.is_file():
            raise ConfigurationError(
                f"File does not exist: {path}",
                details={"file_path": str(path), "must_exist": must_exist}
            )

        return path.resolve()

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Invalid file path: {file_path}",
            details={"file_path": str(file_path), "error": str(e)}
        )


def validate_directory_path(dir_path: Union[str, Path]) -> Path:
    """
    Validate and normalize an existing directory path.

    Raises:
        ConfigurationError: If the path is missing or not a directory
    """
    try:
        path = Path(dir_path)

        if not path.exists():
            raise ConfigurationError(
                f"Directory does not exist: {path}",
                details={"dir_path": str(path)}
            )

        resolved_path = path.resolve()
        if not resolved_path.is_dir():
            raise ConfigurationError(
                f"Path is not a directory: {resolved_path}",
                details={"dir_path": str(resolved_path)}
            )

        return resolved_path

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Invalid directory path: {dir_path}",
            details={"dir_path": str(dir_path), "error": str(e)}
        )


def validate_numeric_range(
    value: Union[int, float],
    min_value: Optional[Union[int, float]] = None,
    max_value: Optional[Union[int, float]] = None,
    field_name: str = "value"
) -> Union[int, float]:
    """
    Validate a numeric value is within specified range.

    Args:
        value: Numeric value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive)
        field_name: Name of the field for error messages

    Returns:
        The validated value

    Raises:
        ConfigurationError: If value is outside the allowed range
    """
    if min_value is not None and value < min_value:
        raise ConfigurationError(
            f"{field_name} {value} is below minimum {min_value}",
            details={
                "field_name": field_name,
                "value": value,
                "min_value": min_value,
                "max_value": max_value
            }
        )

    if max_value is not None and value > max_value:
        raise ConfigurationError(
            f"{field_name} {value} is above maximum {max_value}",
            details={
                "field_name": field_name,
                "value": value,
                "min_value": min_value,
                "max_value": max_value
            }
        )

    return value


def validate_enum_value(
    value: Any,
    allowed_values: List[Any],
    field_name: str = "value"
) -> Any:
    """
    Validate a value is one of the allowed enum values.

    Raises:
        ConfigurationError: If value is not in the allowed list
    """
    if value not in allowed_values:
        raise ConfigurationError(
            f"{field_name} '{value}' is not allowed. Allowed values: {allowed_values}",
            details={
                "field_name": field_name,
                "value": value,
                "allowed_values": allowed_values
            }
        )

    return value


def validate_sport(sport: str, known_sports: List[str]) -> str:
    """Match a sport name case-insensitively against the reference sports."""
    by_upper = {s.upper(): s for s in known_sports}
    key = sport.strip().upper() if isinstance(sport, str) else sport
    validate_enum_value(key, list(by_upper), field_name="sport")
    return by_upper[key]
