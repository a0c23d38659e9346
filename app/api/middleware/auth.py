"""Authentication dispatch between API keys and bearer tokens."""

from collections.abc import Mapping
from enum import StrEnum

from fastapi import Request

from app.api.errors import unauthorized
from app.core.config import get_settings
from app.core.logging import get_logger
from app.models.auth import Principal
from app.services.api_keys import ApiKeyDirectory, ApiKeyValidator, CredentialRejectedError
from app.services.tokens import BearerTokenVerifier

logger = get_logger(__name__)

BEARER_PREFIX = "bearer "


class AuthScheme(StrEnum):
    """Authentication scheme selected for a request."""

    API_KEY = "api_key"
    BEARER = "bearer"


def select_scheme(headers: Mapping[str, str], api_key_header: str) -> AuthScheme:
    """
    Choose the scheme for a request.

    The API key header wins whenever it is present, even if empty or if an
    Authorization header is also sent. Everything else goes to bearer.
    """
    wanted = api_key_header.lower()
    if any(name.lower() == wanted for name in headers.keys()):
        return AuthScheme.API_KEY
    return AuthScheme.BEARER


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token of an ``Authorization: Bearer <token>`` header, if any."""
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX) :].strip()
    return token or None


def _header_value(headers: Mapping[str, str], name: str) -> str | None:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


async def get_current_principal(request: Request) -> Principal:
    """
    Authenticate the request under exactly one scheme.

    Reads the current settings snapshot on every call.

    Returns:
        The authenticated principal

    Raises:
        APIError: 401 when the selected scheme has no credential or rejects it
    """
    settings = get_settings()
    scheme = select_scheme(request.headers, settings.auth.api_key_header)

    try:
        if scheme is AuthScheme.API_KEY:
            validator = ApiKeyValidator(ApiKeyDirectory(settings.auth))
            principal = validator.validate(
                _header_value(request.headers, settings.auth.api_key_header)
            )
        else:
            token = extract_bearer_token(request.headers.get("Authorization"))
            if token is None:
                logger.info("No credential presented")
                raise unauthorized()
            principal = BearerTokenVerifier(settings.auth.jwt).verify(token)
    except CredentialRejectedError as exc:
        logger.warning(
            "Authentication failed", extra={"scheme": str(scheme), "reason": exc.reason}
        )
        raise unauthorized() from exc

    request.state.principal = principal
    return principal


async def get_principal_for_health(request: Request) -> Principal | None:
    """Require a principal for /healthz only when anonymous access is disabled."""
    if get_settings().health.allow_anonymous:
        return None
    return await get_current_principal(request)
