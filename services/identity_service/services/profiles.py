"""Read helpers for encrypted profile fields."""

from typing import Optional

from libs.common.encryption import safe_decrypt
from services.identity_service.models import Profile


def profile_names(profile: Optional[Profile]) -> tuple[str, str]:
    if profile is None:
        return "", ""
    return safe_decrypt(profile.first_name), safe_decrypt(profile.last_name)


def full_name(profile: Optional[Profile], fallback: str = "") -> str:
    first, last = profile_names(profile)
    name = f"{first} {last}".strip()
    return name or fallback
