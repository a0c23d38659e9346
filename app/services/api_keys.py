"""API key lookup and validation."""

from app.core.config import AuthConfig
from app.core.logging import get_logger
from app.core.security import hash_credential
from app.models.auth import APIKeyRecord, AuthMethod, Principal

logger = get_logger(__name__)


class CredentialRejectedError(Exception):
    """Raised when a credential is missing or does not validate."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ApiKeyDirectory:
    """Read-only view over the API key records of one configuration snapshot."""

    def __init__(self, config: AuthConfig) -> None:
        self._records = config.api_keys

    def find_by_hash(self, key_hash: str) -> APIKeyRecord | None:
        """
        Find the enabled record whose digest matches.

        Args:
            key_hash: SHA-256 hex digest, any case

        Returns:
            Matching record or None
        """
        wanted = key_hash.lower()
        for record in self._records:
            if record.enabled and record.key_hash == wanted:
                return record
        return None


class ApiKeyValidator:
    """Validates raw API keys against an :class:`ApiKeyDirectory`."""

    def __init__(self, directory: ApiKeyDirectory) -> None:
        self._directory = directory

    def validate(self, raw_key: str | None) -> Principal:
        """
        Resolve a raw API key to a principal.

        Args:
            raw_key: Header value as received

        Returns:
            Principal for the matching key record

        Raises:
            CredentialRejectedError: "missing credential" or "invalid credential"
        """
        if raw_key is None or not raw_key.strip():
            raise CredentialRejectedError("missing credential")

        key_hash = hash_credential(raw_key.strip())
        record = self._directory.find_by_hash(key_hash)
        if record is None:
            logger.warning("API key not found", extra={"key_hash": key_hash[:16]})
            raise CredentialRejectedError("invalid credential")

        logger.debug("API key validated", extra={"key_id": record.key_id})
        return Principal(
            subject_id=record.key_id,
            display_name=record.owner,
            auth_method=AuthMethod.API_KEY,
        )
