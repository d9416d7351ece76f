"""Form validation utilities.

Each validator returns an error message, or ``None`` when the value is valid.
"""

import re
from typing import Optional

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
UPPERCASE_REGEX = re.compile(r"[A-Z]")
SPECIAL_CHAR_REGEX = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]+")

NAME_MIN_LENGTH = 20
NAME_MAX_LENGTH = 60
ADDRESS_MAX_LENGTH = 400
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 16


def validate_name(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Name is required"
    if len(value) < NAME_MIN_LENGTH:
        return f"Name must be at least {NAME_MIN_LENGTH} characters"
    if len(value) > NAME_MAX_LENGTH:
        return f"Name must be at most {NAME_MAX_LENGTH} characters"
    return None


def validate_address(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Address is required"
    if len(value) > ADDRESS_MAX_LENGTH:
        return f"Address must be at most {ADDRESS_MAX_LENGTH} characters"
    return None


def validate_email(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Email is required"
    if not EMAIL_REGEX.match(value):
        return "Invalid email format"
    return None


def validate_password(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Password is required"
    if len(value) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
    if len(value) > PASSWORD_MAX_LENGTH:
        return f"Password must be at most {PASSWORD_MAX_LENGTH} characters"
    if not UPPERCASE_REGEX.search(value):
        return "Password must include at least one uppercase letter"
    if not SPECIAL_CHAR_REGEX.search(value):
        return "Password must include at least one special character"
    return None


def validate_rating(value: float) -> Optional[str]:
    if value < 1 or value > 5:
        return "Rating must be between 1 and 5"
    return None
