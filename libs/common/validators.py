"""Input validation helpers shared by the HTTP handlers."""

import re
from typing import Optional

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]+$")
ZIP_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")

US_STATE_CODES = frozenset(
    """AL AK AZ AR CA CO CT DE FL GA HI ID IL IN IA KS KY LA ME MD MA MI MN MS
    MO MT NE NV NH NJ NM NY NC ND OH OK OR PA RI SC SD TN TX UT VT VA WA WV WI
    WY""".split()
)


def is_valid_uuid(value) -> bool:
    return isinstance(value, str) and bool(UUID_PATTERN.match(value))


def is_valid_email(value) -> bool:
    return (
        isinstance(value, str)
        and len(value) <= 100
        and bool(EMAIL_PATTERN.match(value))
    )


def sanitize_input(value) -> str:
    if not isinstance(value, str):
        return ""
    return re.sub(r"[<>\"']", "", value.strip())


def validate_profile_fields(data: dict) -> Optional[str]:
    """Return the first validation error for onboarding profile data."""
    for field, label in (("firstName", "First name"), ("lastName", "Last name")):
        value = sanitize_input(data.get(field))
        if not value or len(value) > 50 or not NAME_PATTERN.match(value):
            return f"{label} is required and must contain only letters"
    address = sanitize_input(data.get("address"))
    if not address or len(address) > 200:
        return "Address is required"
    city = sanitize_input(data.get("city"))
    if not city or len(city) > 100:
        return "City is required"
    state = sanitize_input(data.get("state")).upper()
    if state not in US_STATE_CODES:
        return "A valid US state is required"
    zip_code = sanitize_input(data.get("zipCode"))
    if not ZIP_PATTERN.match(zip_code):
        return "A valid ZIP code is required"
    return None
