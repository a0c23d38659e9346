"""Data models for the application."""

from app.models.assets import AssetMetadata, ErrorResponse
from app.models.audit import DownloadAuditEntry
from app.models.auth import APIKeyRecord, AuthMethod, Principal

__all__ = [
    "APIKeyRecord",
    "AssetMetadata",
    "AuthMethod",
    "DownloadAuditEntry",
    "ErrorResponse",
    "Principal",
]
