"""Validation utilities for the OTM pipeline."""

from typing import Any, Dict, List, Optional

from .config import EQUIPMENT_CODE_LENGTH
from .exceptions import ValidationError


def validate_equipment_code(code: Any) -> str:
    """
    Validate an equipment code as printed on the equipment QR label.

    Args:
        code: Code to validate

    Returns:
        Code stripped of surrounding whitespace

    Raises:
        ValidationError: If the code is missing, not numeric or of the wrong length
    """
    if code is None or not str(code).strip():
        raise ValidationError("Equipment code is required")

    code = str(code).strip()

    if not code.isdigit():
        raise ValidationError("Equipment code must contain only digits")

    if len(code) != EQUIPMENT_CODE_LENGTH:
        raise ValidationError(
            f"Equipment code must have {EQUIPMENT_CODE_LENGTH} digits (has {len(code)})"
        )

    return code


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> None:
    """
    Validate that required fields are present in data.

    Args:
        data: Data dictionary to validate
        required_fields: List of required field names

    Raises:
        ValidationError: If any required field is missing
    """
    missing_fields = [field for field in required_fields if field not in data or data[field] in (None, '')]

    if missing_fields:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing_fields)}"
        )


def validate_file_name(file_name: str) -> str:
    """
    Validate a document file name used as part of a storage key.

    Raises:
        ValidationError: If the name is empty or contains path separators
    """
    if not file_name or not file_name.strip():
        raise ValidationError("File name is required")

    file_name = file_name.strip()

    if '/' in file_name or '\\' in file_name or file_name in ('.', '..'):
        raise ValidationError("Invalid file name")

    return file_name


def sanitize_string(value: Any, max_length: Optional[int] = None) -> str:
    """
    Sanitize free-text input.

    Args:
        value: String to sanitize (None becomes empty)
        max_length: Optional maximum length

    Returns:
        Sanitized string

    Raises:
        ValidationError: If string is invalid
    """
    if value is None:
        return ''

    if not isinstance(value, str):
        raise ValidationError("Value must be a string")

    value = value.strip()

    if max_length and len(value) > max_length:
        raise ValidationError(f"Value exceeds maximum length of {max_length}")

    return value
