"""
Configuration Management
Loads and validates environment variables
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
import secrets


class Settings(BaseSettings):
    """Application settings from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )
    # Required
    TOKEN_SALT: str = secrets.token_hex(32)
    BASE_URL: str = "http://localhost:8000"

    # Secret used to encrypt Jellyfin access tokens inside config tokens
    # (falls back to TOKEN_SALT when unset)
    CREDENTIAL_KEY: Optional[str] = None

    # Jellyfin server
    JELLYFIN_URL: str = "http://localhost:8096"
    # URL Stremio clients use for images and streams (defaults to JELLYFIN_URL)
    JELLYFIN_PUBLIC_URL: Optional[str] = None
    JELLYFIN_TIMEOUT: int = 15  # seconds

    # Addon identity
    APP_NAME: str = "Jellio"
    APP_VERSION: str = "0.0.1"
    ID_PREFIX: str = "source"
    DEVICE_NAME: str = "Jellio"
    CONTACT_EMAIL: str = "support@jellio.stream"

    # Catalog paging
    CATALOG_PAGE_SIZE: int = 100

    # Development
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    @property
    def public_url(self) -> str:
        """Base URL used in image and stream links handed to Stremio"""
        return (self.JELLYFIN_PUBLIC_URL or self.JELLYFIN_URL).rstrip("/")


settings = Settings()
