"""Bearer token (JWT) verification."""

from typing import Any

import jwt

from app.core.config import JWTConfig
from app.core.logging import get_logger
from app.models.auth import AuthMethod, Principal
from app.services.api_keys import CredentialRejectedError

logger = get_logger(__name__)

INVALID_TOKEN = "invalid token"


class BearerTokenVerifier:
    """
    Verifies HMAC-signed JWTs against the configured secret.

    Expiry is always required and checked. Issuer and audience are checked
    only when enabled in configuration. Every failure is reported with the
    same reason so callers cannot tell which check failed.
    """

    def __init__(self, config: JWTConfig) -> None:
        self._config = config

    def verify(self, raw_token: str | None) -> Principal:
        """
        Verify a raw bearer token.

        Args:
            raw_token: Token without the "Bearer " prefix

        Returns:
            Principal for the token subject

        Raises:
            CredentialRejectedError: Always with reason "invalid token"
        """
        if raw_token is None or not raw_token.strip():
            raise CredentialRejectedError(INVALID_TOKEN)

        try:
            claims = self._decode(raw_token.strip())
        except jwt.PyJWTError as exc:
            logger.warning("Bearer token rejected", extra={"error_type": type(exc).__name__})
            raise CredentialRejectedError(INVALID_TOKEN) from exc

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            logger.warning("Bearer token has no subject")
            raise CredentialRejectedError(INVALID_TOKEN)

        name = claims.get("name")
        return Principal(
            subject_id=subject,
            display_name=name if isinstance(name, str) and name else subject,
            auth_method=AuthMethod.JWT,
        )

    def _decode(self, token: str) -> dict[str, Any]:
        config = self._config
        options = {
            "require": ["exp", "sub"],
            "verify_signature": True,
            "verify_exp": True,
            "verify_nbf": True,
            "verify_iss": config.validate_issuer,
            "verify_aud": config.validate_audience,
        }
        return jwt.decode(
            token,
            config.signing_key,
            algorithms=list(config.algorithms),
            options=options,
            audience=config.audience if config.validate_audience else None,
            issuer=config.issuer if config.validate_issuer else None,
            leeway=config.clock_skew_seconds,
        )
