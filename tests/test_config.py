from __future__ import annotations

import pytest

from posdesk.config import ConfigError, load_config


@pytest.fixture
def base_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    monkeypatch.setenv("POSDESK_BACKEND_URL", "https://pos.example.test/")
    monkeypatch.setenv("POSDESK_ANON_KEY", "anon-key")
    return monkeypatch


def test_load_config_requires_url_and_key() -> None:
    with pytest.raises(ConfigError, match="POSDESK_BACKEND_URL, POSDESK_ANON_KEY"):
        load_config()


def test_load_config_defaults(base_env: pytest.MonkeyPatch) -> None:
    cfg = load_config()
    assert cfg.backend_url == "https://pos.example.test"
    assert cfg.env_name == "dev"
    assert cfg.connect_timeout_seconds == 5.0
    assert cfg.read_timeout_seconds == 10.0
    assert cfg.retries == 3
    assert cfg.stock_write_workers == 4
    assert cfg.guard_stock_writes is False
    assert cfg.catalog_limit == 5
    assert cfg.receipt_language == "es"
    assert cfg.verify_ssl is True


def test_load_config_profile_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POSDESK_ENV", "Staging")
    monkeypatch.setenv("POSDESK_BACKEND_URL_STAGING", "https://staging.example.test")
    monkeypatch.setenv("POSDESK_BACKEND_URL", "https://default.example.test")
    monkeypatch.setenv("POSDESK_ANON_KEY", "anon-key")
    cfg = load_config()
    assert cfg.backend_url == "https://staging.example.test"
    assert cfg.normalized_env == "staging"


def test_load_config_reads_env_file(tmp_path) -> None:
    env_file = tmp_path / "pos.env"
    env_file.write_text(
        "POSDESK_BACKEND_URL=https://file.example.test\n"
        "POSDESK_ANON_KEY=file-key\n"
        "POSDESK_GUARD_STOCK_WRITES=yes\n"
        "POSDESK_RECEIPT_LANGUAGE=EN\n"
    )
    cfg = load_config(str(env_file))
    assert cfg.backend_url == "https://file.example.test"
    assert cfg.guard_stock_writes is True
    assert cfg.receipt_language == "en"


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("POSDESK_TIMEOUT_SECONDS", "0"),
        ("POSDESK_CONNECT_TIMEOUT_SECONDS", "0"),
        ("POSDESK_READ_TIMEOUT_SECONDS", "-1"),
        ("POSDESK_RETRIES", "-1"),
        ("POSDESK_RETRY_BACKOFF_SECONDS", "-0.1"),
        ("POSDESK_MAX_CONNECTIONS", "0"),
        ("POSDESK_STOCK_WRITE_WORKERS", "0"),
        ("POSDESK_CATALOG_LIMIT", "0"),
        ("POSDESK_RECEIPT_LANGUAGE", "fr"),
        ("POSDESK_RETRIES", "many"),
    ],
)
def test_load_config_rejects_invalid_values(base_env: pytest.MonkeyPatch, key: str, value: str) -> None:
    base_env.setenv(key, value)
    with pytest.raises(ConfigError, match=key):
        load_config()
