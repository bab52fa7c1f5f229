"""
Utils module untuk PIN Gate API.
Berisi utilitas helper seperti validators.
"""

from app.utils.validators import (
    check_pin_format,
    validate_pin_format,
    is_valid_enrollment_digest
)

__all__ = [
    "check_pin_format",
    "validate_pin_format",
    "is_valid_enrollment_digest"
]
