"""
User Configuration Models
Pydantic models for user-specific configuration
"""
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from uuid import UUID


class UserConfig(BaseModel):
    """User configuration embedded in addon URL"""
    auth_token: Optional[str] = Field(None, description="Jellyfin access token")
    auth_token_enc: Optional[str] = Field(None, description="Encrypted Jellyfin access token")
    libraries: List[UUID] = Field(..., min_length=1, description="Jellyfin libraries exposed as catalogs")
    server_name: str = Field("Jellyfin", description="Server name shown in catalog names")

    @model_validator(mode="after")
    def validate_auth_source(self):
        if not self.auth_token and not self.auth_token_enc:
            raise ValueError("Provide either auth_token or auth_token_enc")
        return self
