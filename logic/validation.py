"""
logic/validation.py
Pure logic: validates waitlist emails before any store work happens.
No API calls. No business logic.
"""

import re

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_EMAIL_LENGTH = 254

INVALID_EMAIL_MESSAGE = "Please enter a valid email address."


class InvalidInput(ValueError):
    code = "INVALID_INPUT"


def normalize_email(raw: str) -> str:
    return (raw or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email)) and len(email) <= MAX_EMAIL_LENGTH


def validate_email(raw) -> str:
    """
    Validates a waitlist email.

    Rules:
    - must be a string
    - strip + lowercase
    - local-part "@" domain with at least one dot, no whitespace
    - at most 254 characters

    Returns:
        the normalized email.

    Raises:
        InvalidInput (a ValueError) if the email is malformed.
    """
    if not isinstance(raw, str):
        raise InvalidInput(INVALID_EMAIL_MESSAGE)

    email = normalize_email(raw)
    if not is_valid_email(email):
        raise InvalidInput(INVALID_EMAIL_MESSAGE)

    return email
