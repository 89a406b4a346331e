"""
Access Token Encryption
Keeps Jellyfin access tokens unreadable inside configuration tokens
"""
import base64
import hashlib
from typing import Optional
from cryptography.fernet import Fernet, InvalidToken
from app.core.config import settings


def _key() -> bytes:
    """32-byte Fernet key derived from CREDENTIAL_KEY, or TOKEN_SALT when unset"""
    secret = settings.CREDENTIAL_KEY or settings.TOKEN_SALT
    return base64.urlsafe_b64encode(hashlib.sha256(secret.encode("utf-8")).digest())


def encrypt_secret(value: str) -> str:
    """
    Encrypt a Jellyfin access token

    Args:
        value: Plaintext access token

    Returns:
        Fernet token (urlsafe base64)
    """
    return Fernet(_key()).encrypt(value.encode("utf-8")).decode("utf-8")


def decrypt_secret(token: str) -> Optional[str]:
    """
    Decrypt an access token produced by encrypt_secret

    Returns:
        The access token, or None if the value is malformed or was encrypted
        with another key
    """
    try:
        return Fernet(_key()).decrypt(token.encode("utf-8")).decode("utf-8")
    except (InvalidToken, ValueError):
        return None
