"""
Token Management Utilities
Handles encoding/decoding of user configuration in addon URLs
"""
import base64
import binascii
import json
import hmac
import hashlib
from typing import Optional
from pydantic import ValidationError
from app.models.config import UserConfig
from app.core.config import settings
from app.utils.crypto import decrypt_secret


def _sign(config_json: str) -> str:
    return hmac.new(
        settings.TOKEN_SALT.encode('utf-8'),
        config_json.encode('utf-8'),
        hashlib.sha256
    ).hexdigest()


def encode_config(config: UserConfig) -> str:
    """
    Encode user configuration into a signed token

    Args:
        config: User configuration object

    Returns:
        Base64-encoded token string, safe as a URL path segment
    """
    config_json = config.model_dump_json(exclude_none=True)
    payload = {
        'config': config_json,
        'signature': _sign(config_json)
    }

    payload_json = json.dumps(payload)
    return base64.urlsafe_b64encode(payload_json.encode('utf-8')).decode('utf-8')


def decode_config(token: str) -> Optional[UserConfig]:
    """
    Decode and validate user configuration from token

    Args:
        token: Base64-encoded token string

    Returns:
        UserConfig object if valid and correctly signed, None otherwise
    """
    try:
        payload_json = base64.urlsafe_b64decode(token.encode('utf-8')).decode('utf-8')
        payload = json.loads(payload_json)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None

    if not isinstance(payload, dict):
        return None

    config_json = payload.get('config')
    signature = payload.get('signature')
    if not isinstance(config_json, str) or not isinstance(signature, str):
        return None

    if not hmac.compare_digest(signature.encode('utf-8'), _sign(config_json).encode('utf-8')):
        return None

    try:
        return UserConfig.model_validate_json(config_json)
    except ValidationError:
        return None


def validate_token(token: str) -> bool:
    """
    Validate if a token is properly formatted and signed

    Args:
        token: Token string to validate

    Returns:
        True if valid, False otherwise
    """
    return decode_config(token) is not None


def resolve_access_token(config: UserConfig) -> Optional[str]:
    """Jellyfin access token from config, decrypting it when stored encrypted"""
    if config.auth_token:
        return config.auth_token
    if config.auth_token_enc:
        return decrypt_secret(config.auth_token_enc)
    return None
