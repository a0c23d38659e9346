"""Asset and error response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AssetMetadata(BaseModel):
    """Metadata derived from the filesystem for one asset."""

    model_config = ConfigDict(frozen=True)

    file_name: str = Field(description="Sanitized file name")
    content_type: str = Field(description="MIME type inferred from the extension")
    size_bytes: int = Field(ge=0, description="File size in bytes")
    last_modified_utc: datetime = Field(description="Modification time in UTC")
    validation_token: str = Field(description="Weak ETag derived from size and mtime")


class ErrorResponse(BaseModel):
    """Structured error body."""

    error: str
    detail: str | None = None
