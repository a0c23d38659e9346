"""Authentication models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

SHA256_HEX_LENGTH = 64


class AuthMethod(StrEnum):
    """How a principal was authenticated."""

    API_KEY = "api_key"
    JWT = "jwt"


class APIKeyRecord(BaseModel):
    """API key record from configuration. Only the key digest is stored."""

    model_config = ConfigDict(frozen=True)

    key_id: str = Field(description="Unique identifier for the key")
    owner: str = Field(description="Owner of the key")
    key_hash: str = Field(description="SHA-256 hex digest of the raw key")
    enabled: bool = Field(default=True, description="Whether the key is accepted")

    @field_validator("key_hash")
    @classmethod
    def normalize_key_hash(cls, value: str) -> str:
        """Require a 64-character hex digest and store it lowercase."""
        key_hash = value.strip().lower()
        if len(key_hash) != SHA256_HEX_LENGTH or any(
            c not in "0123456789abcdef" for c in key_hash
        ):
            raise ValueError("'key_hash' must be a 64-character hexadecimal SHA-256 hash")
        return key_hash


class Principal(BaseModel):
    """Identity resolved for an authenticated request."""

    model_config = ConfigDict(frozen=True)

    subject_id: str = Field(description="Key id or token subject")
    display_name: str = Field(description="Key owner or token display name")
    auth_method: AuthMethod = Field(description="Scheme that authenticated the request")
