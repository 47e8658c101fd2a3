"""Temporary password generation for admin-initiated resets."""

import secrets
from datetime import datetime, timedelta
from typing import Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now

UPPERCASE = "ABCDEFGHJKLMNPQRSTUVWXYZ"
LOWERCASE = "abcdefghijkmnopqrstuvwxyz"
DIGITS = "23456789"
SPECIAL = "!@#$%&*"
CHARACTER_CLASSES = (UPPERCASE, LOWERCASE, DIGITS, SPECIAL)
ALL_CHARACTERS = "".join(CHARACTER_CLASSES)

TEMPORARY_PASSWORD_LENGTH = 16


def generate_temporary_password(length: int = TEMPORARY_PASSWORD_LENGTH) -> str:
    """
    Build a password with one character from every class, fill the rest
    from the union of the classes, then shuffle.

    Ambiguous glyphs (I, O, l, 0, 1) are excluded from the alphabet.
    """
    if length < len(CHARACTER_CLASSES):
        raise ValueError("length must fit one character from every class")

    chars = [secrets.choice(charset) for charset in CHARACTER_CLASSES]
    chars.extend(secrets.choice(ALL_CHARACTERS) for _ in range(length - len(chars)))

    # Fisher-Yates with a CSPRNG
    for i in range(len(chars) - 1, 0, -1):
        j = secrets.randbelow(i + 1)
        chars[i], chars[j] = chars[j], chars[i]
    return "".join(chars)


def temporary_password_expiry(now: Optional[datetime] = None) -> datetime:
    now = now or utc_now()
    return now + timedelta(days=get_settings().TEMPORARY_PASSWORD_TTL_DAYS)


def password_strength_error(password: str) -> Optional[str]:
    """Return a message describing why ``password`` is too weak, else None."""
    if not isinstance(password, str) or len(password) < 8:
        return "Password must be at least 8 characters long"
    if not any(c.isupper() for c in password):
        return "Password must contain at least one uppercase letter"
    if not any(c.islower() for c in password):
        return "Password must contain at least one lowercase letter"
    if not any(c.isdigit() for c in password):
        return "Password must contain at least one number"
    if all(c.isalnum() for c in password):
        return "Password must contain at least one special character"
    return None
