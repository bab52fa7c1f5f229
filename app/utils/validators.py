"""
Validator utilities untuk PIN Gate API.
Menyediakan fungsi-fungsi validasi untuk input kredensial.
"""

import re
from typing import List, Tuple

from app.core.config import settings
from app.core.exceptions import InvalidCredentialFormatError


# Regex patterns
PIN_PATTERN = re.compile(r'^[0-9]+$')
ENROLLMENT_DIGEST_PATTERN = re.compile(r'^[A-Za-z0-9+/=_-]{16,128}$')


def check_pin_format(
    pin: str,
    min_length: int = settings.PIN_MIN_LENGTH,
    max_length: int = settings.PIN_MAX_LENGTH
) -> Tuple[bool, List[str]]:
    """
    Check format PIN.

    Rules:
    - Hanya digit
    - Panjang antara min_length dan max_length

    Args:
        pin: PIN to validate
        min_length: Panjang minimal
        max_length: Panjang maksimal

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    if not pin or not isinstance(pin, str):
        return False, ["PIN is required"]

    if not PIN_PATTERN.match(pin):
        errors.append("PIN must contain digits only")

    if len(pin) < min_length:
        errors.append(f"PIN must be at least {min_length} digits")
    elif len(pin) > max_length:
        errors.append(f"PIN must be at most {max_length} digits")

    return len(errors) == 0, errors


def validate_pin_format(pin: str) -> str:
    """
    Validate PIN sebelum diteruskan ke AuthService.

    Args:
        pin: PIN dari request

    Returns:
        PIN yang valid

    Raises:
        InvalidCredentialFormatError: Jika format PIN salah
    """
    is_valid, errors = check_pin_format(pin)
    if not is_valid:
        raise InvalidCredentialFormatError(details={"pin_errors": errors})
    return pin


def is_valid_enrollment_digest(digest: str) -> bool:
    """
    Validate enrollment digest yang dikirim device.

    Args:
        digest: Base64/hex digest

    Returns:
        True if digest is valid, False otherwise
    """
    if not digest or not isinstance(digest, str):
        return False
    return bool(ENROLLMENT_DIGEST_PATTERN.fullmatch(digest))
