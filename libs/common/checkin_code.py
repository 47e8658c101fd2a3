"""
Check-in code format helpers.

A code is two letters (usually the holder's initials) followed by four digits,
e.g. ``AB0427``. Input from kiosks and phones is normalized before matching.
"""

import re
import secrets
import string
import unicodedata
from typing import Optional

CHECKIN_CODE_PATTERN = re.compile(r"^[A-Z]{2}\d{4}$")


def normalize_checkin_code(value) -> str:
    if not isinstance(value, str):
        return ""
    return re.sub(r"[^A-Z0-9]", "", value.strip().upper())


def is_valid_checkin_code(value: str) -> bool:
    return bool(CHECKIN_CODE_PATTERN.match(value or ""))


def _letters(value: Optional[str]) -> str:
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return re.sub(r"[^A-Z]", "", stripped.upper())


def _random_letters(count: int = 2) -> str:
    return "".join(secrets.choice(string.ascii_uppercase) for _ in range(count))


def sanitize_checkin_initials(value: Optional[str]) -> str:
    letters = _letters(value)
    if len(letters) >= 2:
        return letters[:2]
    if len(letters) == 1:
        return f"{letters}X"
    return _random_letters()


def _two_letter_or_padded(value: Optional[str]) -> Optional[str]:
    letters = _letters(value)
    if len(letters) >= 2:
        return letters[:2]
    if len(letters) == 1:
        return f"{letters}X"
    return None


def derive_checkin_initials(
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    email: Optional[str] = None,
    fallback: Optional[str] = None,
) -> str:
    first = _letters(first_name)
    last = _letters(last_name)

    if first and last:
        return f"{first[0]}{last[0]}"
    if len(first) >= 2:
        return first[:2]
    if len(last) >= 2:
        return last[:2]
    if first:
        return f"{first}X"
    if last:
        return f"{last}X"

    local_part = (email or "").split("@")[0]
    from_email = _two_letter_or_padded(local_part)
    if from_email:
        return from_email

    from_fallback = _two_letter_or_padded(fallback)
    if from_fallback:
        return from_fallback
    return "XX"


def generate_checkin_code(initials: Optional[str] = None) -> str:
    prefix = sanitize_checkin_initials(initials)
    return f"{prefix}{secrets.randbelow(10000):04d}"
