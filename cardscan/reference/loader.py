"""Load the versioned reference data files."""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..utils.error_handler import ConfigurationError, ErrorContext, ReferenceDataError, validate_required_fields
from ..utils.log import get_logger
from ..utils.validation import validate_directory_path, validate_file_path

logger = get_logger(__name__)

PACKAGED_DATA_DIR = Path(__file__).parent / "data"

PLAYERS_FILE = "players.json"
TEAMS_FILE = "teams.json"
MANUFACTURERS_FILE = "manufacturers.json"
KEYWORDS_FILE = "keywords.json"


def resolve_data_dir(data_dir: Optional[Union[str, Path]] = None) -> Path:
    """Return the reference data directory, defaulting to the packaged snapshot."""
    if data_dir is None:
        return PACKAGED_DATA_DIR
    try:
        return validate_directory_path(data_dir)
    except ConfigurationError as e:
        raise ReferenceDataError(e.message, details=e.details) from e


def load_data_file(data_dir: Path, filename: str, required: tuple = ()) -> Dict[str, Any]:
    """
    Read one reference JSON file.

    Every file carries a ``version`` key; ``required`` names the additional
    top-level keys the caller depends on.

    Raises:
        ReferenceDataError: If the file is missing, unreadable or incomplete
    """
    try:
        path = validate_file_path(data_dir / filename, must_exist=True)
    except ConfigurationError as e:
        raise ReferenceDataError(f"Reference data file missing: {filename}", details=e.details) from e

    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ReferenceDataError(
            f"Could not read reference data file: {filename}",
            details={"path": str(path), "error": str(e)},
        ) from e

    if not isinstance(payload, dict):
        raise ReferenceDataError(
            f"Reference data file must hold a JSON object: {filename}",
            details={"path": str(path)},
        )

    context = ErrorContext(operation=f"load {filename}", module=__name__, function="load_data_file")
    validate_required_fields(payload, ["version", *required], context)

    logger.debug("Reference data loaded", file=filename, version=payload["version"])
    return payload
