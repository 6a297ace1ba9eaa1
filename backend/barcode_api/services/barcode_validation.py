"""
Barcode Validation

Pure, synchronous checks run before any provider is called.
"""

from typing import Any, List, Optional

from barcode_api.core.constants import BARCODE_PATTERN, MAX_BATCH_SIZE
from barcode_api.core.errors import InvalidInputError


def validate_barcode(raw: Any) -> str:
    """
    Validate a single barcode and return it trimmed.

    Raises:
        InvalidInputError: empty input or not 8-14 ASCII digits
    """
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidInputError("Valid barcode code is required")

    code = raw.strip()
    # \d also matches non-ASCII digits
    if not code.isascii() or not BARCODE_PATTERN.match(code):
        raise InvalidInputError("Barcode must be a numeric string between 8 and 14 digits")
    return code


def validate_barcode_batch(codes: Any, max_size: int = MAX_BATCH_SIZE) -> List[str]:
    """
    Validate a batch payload and return the trimmed barcodes, in input order.

    Raises:
        InvalidInputError: not a list, empty, too large, or any invalid code
            (the message names the first offending code)
    """
    if codes is None:
        raise InvalidInputError("codes array is required")
    if not isinstance(codes, list):
        raise InvalidInputError("codes must be an array")
    if len(codes) == 0:
        raise InvalidInputError("codes array must not be empty")
    if len(codes) > max_size:
        raise InvalidInputError(f"codes array must not contain more than {max_size} items")

    validated = []
    for code in codes:
        if not isinstance(code, str) or not code.strip():
            raise InvalidInputError("All codes must be non-empty strings")
        try:
            validated.append(validate_barcode(code))
        except InvalidInputError:
            raise InvalidInputError(
                f"Invalid barcode format: {code}. Barcode must be a numeric string between 8 and 14 digits"
            )
    return validated


def parse_fields(raw: Optional[str]) -> Optional[List[str]]:
    """
    Parse a comma-separated ``fields`` query value.

    Returns None when nothing usable was given, so callers fall back to the
    provider's full schema.
    """
    if not raw:
        return None
    fields = [field.strip() for field in raw.split(",") if field.strip()]
    return fields or None
