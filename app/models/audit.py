"""Audit trail models."""

from datetime import datetime

from pydantic import BaseModel, Field


class DownloadAuditEntry(BaseModel):
    """Stored download audit entry."""

    timestamp: datetime = Field(description="Time the download was served")
    correlation_id: str | None = Field(default=None, description="Request correlation ID")
    subject: str = Field(description="Authenticated subject")
    auth_method: str = Field(description="Authentication scheme used")
    client_ip: str | None = Field(default=None, description="Client address")
    file_name: str = Field(description="Downloaded file name")
    size_bytes: int = Field(description="File size in bytes")
