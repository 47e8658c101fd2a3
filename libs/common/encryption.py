"""
Field-level encryption for personally identifiable data.

Ciphertexts use the OpenSSL "Salted__" passphrase format (AES-256-CBC with an
MD5 EVP_BytesToKey derivation), which is what the browser-side CryptoJS
library produces, so values written by either side stay readable.

Usage:
    from libs.common.encryption import encrypt, safe_decrypt

    profile.first_name = encrypt("Ada")
    name = safe_decrypt(profile.first_name)
"""

import base64
import hashlib
import os
import re
from typing import Any, Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from libs.common.config import get_settings

SALT_HEADER = b"Salted__"
KEY_SIZE = 32
IV_SIZE = 16

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]+=*$")


class EncryptionError(Exception):
    """Raised when a value cannot be encrypted or decrypted."""


def _passphrase() -> bytes:
    key = get_settings().ENCRYPTION_KEY
    if not key or len(key) < 32:
        raise EncryptionError("ENCRYPTION_KEY must be at least 32 characters")
    return key.encode("utf-8")


def _evp_bytes_to_key(passphrase: bytes, salt: bytes) -> tuple[bytes, bytes]:
    derived = b""
    block = b""
    while len(derived) < KEY_SIZE + IV_SIZE:
        block = hashlib.md5(block + passphrase + salt).digest()
        derived += block
    return derived[:KEY_SIZE], derived[KEY_SIZE : KEY_SIZE + IV_SIZE]


def _encrypt_bytes(data: bytes) -> str:
    salt = os.urandom(8)
    key, iv = _evp_bytes_to_key(_passphrase(), salt)
    padder = padding.PKCS7(128).padder()
    padded = padder.update(data) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(SALT_HEADER + salt + ciphertext).decode("ascii")


def _decrypt_bytes(value: str) -> bytes:
    try:
        raw = base64.b64decode(value, validate=True)
    except (ValueError, TypeError) as exc:
        raise EncryptionError("Failed to decrypt data") from exc
    if not raw.startswith(SALT_HEADER) or len(raw) < 32:
        raise EncryptionError("Failed to decrypt data")

    salt = raw[8:16]
    key, iv = _evp_bytes_to_key(_passphrase(), salt)
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    try:
        padded = decryptor.update(raw[16:]) + decryptor.finalize()
        unpadder = padding.PKCS7(128).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise EncryptionError("Failed to decrypt data") from exc


def encrypt(text: Optional[str]) -> str:
    if not text:
        return ""
    return _encrypt_bytes(text.encode("utf-8"))


def decrypt(ciphertext: Optional[str]) -> str:
    if not ciphertext:
        return ""
    try:
        return _decrypt_bytes(ciphertext).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise EncryptionError("Failed to decrypt data") from exc


def is_encrypted(value: Any) -> bool:
    """Heuristic check for a base64 ciphertext."""
    if not isinstance(value, str) or len(value) < 20:
        return False
    return bool(_BASE64_RE.match(value)) and len(value) > 30


def safe_decrypt(value: Optional[str]) -> str:
    """Decrypt when possible; plaintext (legacy rows) is returned unchanged."""
    if not value:
        return ""
    if not is_encrypted(value):
        return value
    try:
        return decrypt(value)
    except EncryptionError:
        return value


def encrypt_data(data: bytes) -> str:
    """Encrypt binary content (e.g. an uploaded photo)."""
    return _encrypt_bytes(base64.b64encode(data))


def decrypt_data(ciphertext: str) -> bytes:
    return base64.b64decode(_decrypt_bytes(ciphertext))


# ---------------------------------------------------------------------------
# Masking for logs
# ---------------------------------------------------------------------------


def mask_email(email: Optional[str]) -> str:
    if not email or "@" not in email:
        return "***@***.***"
    local, _, domain = email.partition("@")
    if not local or not domain:
        return "***@***.***"
    return f"{local[0]}***@{domain}"
