"""
Symmetric encryption for secrets stored at rest (e.g. admin TOTP secrets).

Payload format: ``base64(iv).base64(tag).base64(ciphertext)`` with AES-256-GCM,
a fresh 12-byte IV per encryption and a key derived once from the configured
passphrase via SHA-256.

Decryption never raises: malformed payloads and authentication failures are
logged and return None, which callers must treat as "secret unavailable".
"""

import base64
import binascii
import hashlib
import logging
import os
from functools import lru_cache
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .config import Config

logger = logging.getLogger(__name__)

IV_LENGTH = 12
TAG_LENGTH = 16


def derive_key(passphrase: str) -> bytes:
    """Derive a 32-byte AES key from a passphrase."""
    return hashlib.sha256(passphrase.encode("utf-8")).digest()


class SecretCipher:
    """AES-256-GCM cipher bound to a single derived key."""

    def __init__(self, passphrase: str):
        if not passphrase:
            raise ValueError("Encryption passphrase must not be empty")
        self._aesgcm = AESGCM(derive_key(passphrase))

    def encrypt(self, plain_text: str) -> str:
        if not plain_text:
            raise ValueError("Refusing to encrypt an empty secret")

        iv = os.urandom(IV_LENGTH)
        # AESGCM appends the 16-byte tag to the ciphertext
        sealed = self._aesgcm.encrypt(iv, plain_text.encode("utf-8"), None)
        encrypted, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]

        return ".".join(
            base64.b64encode(part).decode("ascii") for part in (iv, tag, encrypted)
        )

    def decrypt(self, payload: str) -> Optional[str]:
        parts = payload.split(".") if payload else []
        if len(parts) != 3 or not all(parts):
            logger.warning("[Crypto] Failed to decrypt secret: malformed payload")
            return None

        try:
            iv, tag, encrypted = (base64.b64decode(part, validate=True) for part in parts)
        except (binascii.Error, ValueError) as e:
            logger.warning(f"[Crypto] Failed to decrypt secret: invalid base64 ({e})")
            return None

        if len(iv) != IV_LENGTH or len(tag) != TAG_LENGTH:
            logger.warning("[Crypto] Failed to decrypt secret: bad iv/tag length")
            return None

        try:
            decrypted = self._aesgcm.decrypt(iv, encrypted + tag, None)
        except InvalidTag:
            logger.warning("[Crypto] Failed to decrypt secret: authentication tag mismatch")
            return None

        try:
            return decrypted.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("[Crypto] Failed to decrypt secret: plaintext is not UTF-8")
            return None


@lru_cache(maxsize=1)
def get_secret_cipher() -> SecretCipher:
    """
    Process-wide cipher, keyed once from TOTP_ENCRYPTION_KEY.

    Raises:
        ValueError: If TOTP_ENCRYPTION_KEY is not configured
    """
    if not Config.TOTP_ENCRYPTION_KEY:
        raise ValueError("TOTP_ENCRYPTION_KEY environment variable is required")
    return SecretCipher(Config.TOTP_ENCRYPTION_KEY)


def encrypt_secret(plain_text: str) -> str:
    return get_secret_cipher().encrypt(plain_text)


def decrypt_secret(payload: str) -> Optional[str]:
    return get_secret_cipher().decrypt(payload)
