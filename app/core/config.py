"""Configuration management."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models.auth import APIKeyRecord


class AssetsConfig(BaseModel):
    """Asset storage configuration."""

    model_config = ConfigDict(frozen=True)

    root_path: str = Field(default="assets", description="Root folder for assets")
    default_cache_seconds: int = Field(
        default=300, description="Private cache max-age in seconds"
    )


class JWTConfig(BaseModel):
    """Bearer token validation configuration."""

    model_config = ConfigDict(frozen=True)

    signing_key: str = Field(
        default="CHANGE_ME_DEV_ONLY", description="Symmetric HMAC signing secret"
    )
    issuer: str | None = Field(default=None, description="Expected token issuer")
    audience: str | None = Field(default=None, description="Expected token audience")
    validate_issuer: bool = Field(default=False, description="Whether to check the issuer")
    validate_audience: bool = Field(default=False, description="Whether to check the audience")
    clock_skew_seconds: int = Field(
        default=30, ge=0, description="Tolerance applied to exp/nbf checks"
    )
    algorithms: tuple[str, ...] = Field(
        default=("HS256",), description="Accepted HMAC signing algorithms"
    )

    @model_validator(mode="after")
    def require_expected_values(self) -> "JWTConfig":
        """An enabled issuer or audience check needs a value to compare against."""
        if self.validate_issuer and not self.issuer:
            raise ValueError("'issuer' is required when validate_issuer is enabled")
        if self.validate_audience and not self.audience:
            raise ValueError("'audience' is required when validate_audience is enabled")
        return self


class AuthConfig(BaseModel):
    """Authentication configuration."""

    model_config = ConfigDict(frozen=True)

    api_key_header: str = Field(default="X-API-Key", description="API key header name")
    api_keys: tuple[APIKeyRecord, ...] = Field(
        default_factory=tuple, description="Configured API key records"
    )
    jwt: JWTConfig = Field(default_factory=JWTConfig, description="JWT validation settings")

    @model_validator(mode="after")
    def reject_duplicate_digests(self) -> "AuthConfig":
        """
        Reject enabled records sharing the same key digest.

        Lookup would otherwise depend on record order.
        """
        seen: dict[str, str] = {}
        for record in self.api_keys:
            if not record.enabled:
                continue
            if record.key_hash in seen:
                raise ValueError(
                    f"API keys '{seen[record.key_hash]}' and '{record.key_id}' share a key_hash"
                )
            seen[record.key_hash] = record.key_id
        return self


class AuditConfig(BaseModel):
    """Download audit trail configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False, description="Whether the JSONL audit trail is written")
    storage_dir: str = Field(default="data/audit", description="Directory for audit JSONL files")
    retention_days: int = Field(default=30, ge=1, description="Retention window for audit files")


class HealthConfig(BaseModel):
    """Health endpoint configuration."""

    model_config = ConfigDict(frozen=True)

    allow_anonymous: bool = Field(
        default=True, description="Whether /healthz is reachable without credentials"
    )


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = Field(default="Data Assets API", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")

    # CORS
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")

    assets: AssetsConfig = Field(default_factory=AssetsConfig, description="Asset storage")
    auth: AuthConfig = Field(default_factory=AuthConfig, description="Authentication")
    audit: AuditConfig = Field(default_factory=AuditConfig, description="Download audit trail")
    health: HealthConfig = Field(default_factory=HealthConfig, description="Health endpoints")

    # Configuration file path
    config_file: str = Field(
        default="config/main.yaml",
        description="Path to configuration file",
    )

    model_config = SettingsConfigDict(
        env_prefix="DAS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


def load_yaml_config(config_file: str) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_file: Path to the YAML file

    Returns:
        Configuration dictionary, empty if the file does not exist
    """
    config_path = Path(config_file)
    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings() -> Settings:
    """
    Build a fresh settings snapshot from environment and YAML.

    YAML values take precedence over environment variables.
    """
    env_settings = Settings()
    yaml_config = load_yaml_config(env_settings.config_file)
    if not yaml_config:
        return env_settings
    return Settings(**yaml_config)


_current_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the current settings snapshot.

    Callers must read this per use and never hold on to the result across
    requests, so that a reload is picked up everywhere.

    Returns:
        Application settings
    """
    global _current_settings
    if _current_settings is None:
        _current_settings = load_settings()
    return _current_settings


def set_settings(settings: Settings) -> None:
    """Replace the current snapshot as a whole."""
    global _current_settings
    _current_settings = settings


def reload_settings() -> Settings:
    """Reload settings from environment and YAML and publish the new snapshot."""
    settings = load_settings()
    set_settings(settings)
    return settings
