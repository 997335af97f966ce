import re
from typing import Tuple, Optional

from .exceptions import ValidationError

MIN_PASSWORD_LENGTH = 8

_PHONE_RE = re.compile(r'^\d{10}$')


def validate_phone(phone) -> Tuple[bool, Optional[str]]:
    """
    Validate a phone number.

    Returns: (is_valid, error_message)

    The number must be exactly 10 digits with no separators or country code.
    """
    if phone is None:
        return False, "Phone number is required"

    if not _PHONE_RE.match(str(phone)):
        return False, "Phone number must be exactly 10 digits"

    return True, None


def validate_password(password: str, confirm_password: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a new password against its confirmation.

    Returns: (is_valid, error_message)
    """
    if password != confirm_password:
        return False, "Password and confirm password do not match"

    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"

    return True, None


def validate_registration(name, email, phone, password, cpassword) -> None:
    """Check registration fields in order, raising on the first failure"""
    if not all([name, email, phone, password, cpassword]):
        raise ValidationError("All fields are required")

    is_valid, error = validate_password(password, cpassword)
    if not is_valid:
        raise ValidationError(error)

    is_valid, error = validate_phone(phone)
    if not is_valid:
        raise ValidationError(error)
