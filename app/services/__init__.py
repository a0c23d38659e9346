"""Services for the application."""

from app.services.api_keys import ApiKeyDirectory, ApiKeyValidator, CredentialRejectedError
from app.services.assets import AssetStore, compute_validation_token
from app.services.audit import AuditService
from app.services.ranges import ByteRange, RangeNotSatisfiableError, parse_range_header
from app.services.tokens import BearerTokenVerifier

__all__ = [
    "ApiKeyDirectory",
    "ApiKeyValidator",
    "AssetStore",
    "AuditService",
    "BearerTokenVerifier",
    "ByteRange",
    "CredentialRejectedError",
    "RangeNotSatisfiableError",
    "compute_validation_token",
    "parse_range_header",
]
