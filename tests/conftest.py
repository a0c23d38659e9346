"""Pytest configuration and fixtures."""

import os
import time
from collections.abc import AsyncIterator, Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import jwt
import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from app.core.config import AssetsConfig, AuditConfig, AuthConfig, JWTConfig, Settings
from app.core.security import hash_credential
from app.main import create_app
from app.models.auth import APIKeyRecord
from app.services.assets import compute_validation_token

TEST_API_KEY = "das_0123456789abcdef0123456789abcdef"
TEST_SIGNING_KEY = "TEST_SIGNING_KEY_32+_CHARS_LONG____"

# report.csv: 100 bytes, modified 2026-02-09T10:00:00Z
REPORT_CSV = b"id,value\n" + b"".join(f"{i:03d},{i * 7:05d}\n".encode() for i in range(9)) + b"\n"
REPORT_MTIME = 1770631200


@pytest.fixture
def asset_root(tmp_path: Path) -> Path:
    """Create an asset root with a known report.csv and a nested directory."""
    root = tmp_path / "assets"
    root.mkdir()

    report = root / "report.csv"
    report.write_bytes(REPORT_CSV)
    os.utime(report, (REPORT_MTIME, REPORT_MTIME))

    (root / "notes.txt").write_text("hello assets\n", encoding="utf-8")
    (root / "archive.bin").write_bytes(bytes(range(256)))
    (root / "subdir").mkdir()

    (tmp_path / "secret.txt").write_text("outside the root\n", encoding="utf-8")
    return root


@pytest.fixture
def report_etag() -> str:
    """Expected validation token for report.csv."""
    return compute_validation_token(
        len(REPORT_CSV), datetime.fromtimestamp(REPORT_MTIME, tz=UTC)
    )


@pytest.fixture(autouse=True)
def test_settings(
    monkeypatch: pytest.MonkeyPatch, asset_root: Path, tmp_path: Path
) -> Settings:
    """
    Install a deterministic settings snapshot for every test.

    Tests must not depend on a local config/main.yaml or environment.
    """
    settings = Settings(
        assets=AssetsConfig(root_path=str(asset_root), default_cache_seconds=300),
        auth=AuthConfig(
            api_keys=(
                APIKeyRecord(
                    key_id="test-key-1",
                    owner="Test Owner",
                    key_hash=hash_credential(TEST_API_KEY),
                ),
            ),
            jwt=JWTConfig(signing_key=TEST_SIGNING_KEY, issuer="test", audience="test"),
        ),
        audit=AuditConfig(enabled=True, storage_dir=str(tmp_path / "audit")),
    )
    monkeypatch.setattr("app.core.config._current_settings", settings)
    return settings


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Return a factory for HS256 bearer tokens signed with the test key."""

    def factory(
        subject: str | None = "user-123",
        *,
        expires_in: int = 900,
        not_before_offset: int = -60,
        key: str = TEST_SIGNING_KEY,
        **claims: Any,
    ) -> str:
        now = int(time.time())
        payload: dict[str, Any] = {
            "iss": "test",
            "aud": "test",
            "iat": now,
            "nbf": now + not_before_offset,
            "exp": now + expires_in,
        }
        if subject is not None:
            payload["sub"] = subject
        payload.update(claims)
        return jwt.encode(payload, key, algorithm="HS256")

    return factory


@pytest.fixture
def client() -> Iterator[TestClient]:
    """
    Create a test client for a freshly built app.

    Yields:
        TestClient with the lifespan started
    """
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
async def async_client() -> AsyncIterator[AsyncClient]:
    """
    Create an async test client for a freshly built app.

    Yields:
        AsyncClient for making async requests to the app
    """
    app = create_app()
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as test_client:
            yield test_client
