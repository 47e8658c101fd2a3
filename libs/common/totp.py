"""
One-time code helpers for multi-factor authentication.

TOTP secrets and verification use pyotp; QR codes are rendered with qrcode
(Pillow backend) into ``data:`` URLs the frontend can show directly.
"""

import base64
import hashlib
import hmac
import io
import re
import secrets
import string

import pyotp
import qrcode

from libs.common.config import get_settings

BACKUP_CODE_PATTERN = re.compile(r"^[A-Z0-9]{8}$")
TOTP_CODE_PATTERN = re.compile(r"^\d{6}$")
BACKUP_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_totp_secret() -> str:
    return pyotp.random_base32()


def provisioning_uri(secret: str, email: str) -> str:
    return pyotp.TOTP(secret).provisioning_uri(
        name=email, issuer_name=get_settings().TOTP_ISSUER
    )


def qr_data_url(uri: str) -> str:
    image = qrcode.make(uri)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def verify_totp(secret: str, code: str) -> bool:
    if not secret or not TOTP_CODE_PATTERN.match(code or ""):
        return False
    return pyotp.TOTP(secret).verify(code, valid_window=get_settings().TOTP_WINDOW)


def generate_backup_codes(count: int = 10) -> list[str]:
    return [
        "".join(secrets.choice(BACKUP_CODE_ALPHABET) for _ in range(8))
        for _ in range(count)
    ]


def generate_numeric_code(digits: int = 6) -> str:
    return f"{secrets.randbelow(10 ** digits):0{digits}d}"


def hash_code(code: str) -> str:
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def codes_match(code: str, hashed: str) -> bool:
    return hmac.compare_digest(hash_code(code), hashed or "")
