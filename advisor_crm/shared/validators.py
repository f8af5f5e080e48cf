"""Shared validation utilities"""

import re
from typing import Optional

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number, keeping a leading + and the digits.

    Raises:
        ValueError: If fewer than 7 or more than 15 digits remain
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)
    if not 7 <= len(digits) <= 15:
        raise ValueError("Phone number must contain between 7 and 15 digits")

    return f"+{digits}" if phone.strip().startswith("+") else digits


def validate_time_of_day(value: Optional[str]) -> Optional[str]:
    """Validate an HH:MM 24-hour time string"""
    if value is None:
        return value
    if not HHMM_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value


def validate_percentage(value: Optional[int]) -> Optional[int]:
    if value is None:
        return value
    if not 0 <= value <= 100:
        raise ValueError("Percentage must be between 0 and 100")
    return value
