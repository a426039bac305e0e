"""Consistency checks on extracted card data."""

from datetime import datetime
from typing import List, Optional

from ..core.constants import MIN_CARD_YEAR
from ..core.types import ExtractedCardData
from ..ocr.regexes import parse_serial


class Validator:
    """Reports structural inconsistencies; never raises and never edits the data."""

    def __init__(self, current_year: Optional[int] = None):
        self.current_year = current_year

    def validate(self, data: ExtractedCardData) -> List[str]:
        errors: List[str] = []
        max_year = (self.current_year or datetime.now().year) + 1

        if data.year is not None:
            year = data.year.strip()
            if not year.isdigit() or not MIN_CARD_YEAR <= int(year) <= max_year:
                errors.append(f"Invalid year: {data.year}")

        if data.serial_number:
            serial = parse_serial(data.serial_number)
            if serial and serial[0] > serial[1]:
                errors.append(f"Invalid serial number: {serial[0]} > {serial[1]}")

        return errors
