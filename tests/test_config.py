"""Tests for configuration loading."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from app.core import config
from app.core.config import Settings, get_settings, load_settings, reload_settings, set_settings
from app.core.security import hash_credential

YAML_CONFIG = """
app_name: "Assets From YAML"
assets:
  root_path: "/srv/assets"
  default_cache_seconds: 60
auth:
  api_key_header: "X-Client-Key"
  api_keys:
    - key_id: "yaml-key"
      owner: "YAML Owner"
      key_hash: "{digest}"
  jwt:
    signing_key: "yaml-signing-key"
    validate_issuer: true
    issuer: "yaml-issuer"
health:
  allow_anonymous: false
"""


@pytest.fixture
def yaml_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Write a YAML config file and point DAS_CONFIG_FILE at it."""
    path = tmp_path / "main.yaml"
    path.write_text(YAML_CONFIG.format(digest=hash_credential("das_yaml")), encoding="utf-8")
    monkeypatch.setenv("DAS_CONFIG_FILE", str(path))
    return path


def test_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Defaults apply when no YAML file exists."""
    monkeypatch.setenv("DAS_CONFIG_FILE", str(tmp_path / "missing.yaml"))

    settings = load_settings()

    assert settings.assets.root_path == "assets"
    assert settings.assets.default_cache_seconds == 300
    assert settings.auth.api_key_header == "X-API-Key"
    assert settings.auth.api_keys == ()
    assert settings.auth.jwt.clock_skew_seconds == 30
    assert settings.audit.enabled is False
    assert settings.health.allow_anonymous is True


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Nested values can be set from DAS_ environment variables."""
    monkeypatch.setenv("DAS_CONFIG_FILE", str(tmp_path / "missing.yaml"))
    monkeypatch.setenv("DAS_ASSETS__DEFAULT_CACHE_SECONDS", "42")
    monkeypatch.setenv("DAS_AUTH__JWT__SIGNING_KEY", "env-signing-key")

    settings = load_settings()

    assert settings.assets.default_cache_seconds == 42
    assert settings.auth.jwt.signing_key == "env-signing-key"


def test_yaml_config_loaded(yaml_file: Path) -> None:
    """YAML sections populate the nested settings."""
    settings = load_settings()

    assert settings.app_name == "Assets From YAML"
    assert settings.assets.root_path == "/srv/assets"
    assert settings.assets.default_cache_seconds == 60
    assert settings.auth.api_key_header == "X-Client-Key"
    assert settings.auth.api_keys[0].key_id == "yaml-key"
    assert settings.auth.jwt.validate_issuer is True
    assert settings.auth.jwt.issuer == "yaml-issuer"
    assert settings.health.allow_anonymous is False


def test_yaml_with_duplicate_digests_rejected(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Duplicate enabled digests fail at load time."""
    digest = hash_credential("das_dup")
    path = tmp_path / "dup.yaml"
    path.write_text(
        "auth:\n"
        "  api_keys:\n"
        f'    - {{key_id: "a", owner: "A", key_hash: "{digest}"}}\n'
        f'    - {{key_id: "b", owner: "B", key_hash: "{digest}"}}\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("DAS_CONFIG_FILE", str(path))

    with pytest.raises(ValidationError, match="share a key_hash"):
        load_settings()


def test_settings_are_frozen(test_settings: Settings) -> None:
    """Snapshots cannot be mutated in place."""
    with pytest.raises(ValidationError):
        test_settings.assets.default_cache_seconds = 1  # type: ignore[misc]
    with pytest.raises(ValidationError):
        test_settings.app_name = "changed"  # type: ignore[misc]


def test_set_settings_replaces_snapshot(test_settings: Settings) -> None:
    """set_settings publishes a new snapshot to every reader."""
    replacement = test_settings.model_copy(update={"app_name": "Replaced"})

    set_settings(replacement)

    assert get_settings() is replacement


def test_reload_settings_picks_up_yaml(test_settings: Settings, yaml_file: Path) -> None:
    """reload_settings rebuilds the snapshot from disk."""
    assert get_settings() is test_settings

    reloaded = reload_settings()

    assert reloaded.app_name == "Assets From YAML"
    assert config.get_settings() is reloaded


def test_auth_reads_reloaded_keys(
    test_settings: Settings, yaml_file: Path, client: TestClient
) -> None:
    """A reload swaps the API key set without rebuilding the app."""
    old_key = {"X-API-Key": "das_0123456789abcdef0123456789abcdef"}
    assert client.get("/healthz", headers=old_key).status_code == 200

    reload_settings()

    assert client.get("/healthz", headers=old_key).status_code == 401
    assert client.get("/healthz", headers={"X-Client-Key": "das_yaml"}).status_code == 200


def test_yaml_issuer_check_without_issuer_rejected(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Enabling issuer validation without an issuer fails at load time."""
    path = tmp_path / "jwt.yaml"
    path.write_text(
        "auth:\n  jwt:\n    signing_key: \"k\"\n    validate_issuer: true\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("DAS_CONFIG_FILE", str(path))

    with pytest.raises(ValidationError, match="'issuer' is required"):
        load_settings()
