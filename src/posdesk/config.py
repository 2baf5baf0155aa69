from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, TypeVar

from dotenv import load_dotenv

ENV_PREFIX = "POSDESK_"
RECEIPT_LANGUAGES = frozenset({"es", "en"})
_TRUTHY = frozenset({"1", "true", "yes", "on"})

T = TypeVar("T", int, float)


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    env_name: str
    backend_url: str
    anon_key: str
    connect_timeout_seconds: float = 5.0
    read_timeout_seconds: float = 15.0
    retries: int = 3
    retry_backoff_seconds: float = 0.3
    max_connections: int = 20
    verify_ssl: bool = True
    stock_write_workers: int = 4
    guard_stock_writes: bool = False
    catalog_limit: int = 5
    receipt_language: str = "es"
    rest_path: str = "/rest/v1"
    auth_path: str = "/auth/v1"

    @property
    def normalized_env(self) -> str:
        return self.env_name.lower().strip()


def _text(name: str, default: str = "") -> str:
    return (os.getenv(ENV_PREFIX + name) or default).strip()


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _number(name: str, default: T, parse: Callable[[str], T], *, minimum: T, strict: bool = False) -> T:
    """Read ``POSDESK_<name>``; ``strict`` makes ``minimum`` itself invalid."""
    key = ENV_PREFIX + name
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        value = default
    else:
        try:
            value = parse(raw.strip())
        except ValueError as exc:
            raise ConfigError(f"Invalid {key}: expected a number, got {raw!r}") from exc
    if value < minimum or (strict and value == minimum):
        bound = f"> {minimum}" if strict else f">= {minimum}"
        raise ConfigError(f"Invalid {key}: expected {bound}, got {value}")
    return value


def load_config(env_file: str | None = None) -> ClientConfig:
    """Build the client config from ``POSDESK_*`` variables, after loading ``env_file`` (or a found ``.env``)."""
    load_dotenv(env_file)

    env_name = _text("ENV", "dev")
    backend_url = _text(f"BACKEND_URL_{env_name.upper()}") or _text("BACKEND_URL")
    anon_key = _text("ANON_KEY")
    missing = [
        ENV_PREFIX + name
        for name, value in (("BACKEND_URL", backend_url), ("ANON_KEY", anon_key))
        if not value
    ]
    if missing:
        raise ConfigError(f"Missing required config values: {', '.join(missing)}")

    timeout = _number("TIMEOUT_SECONDS", 10.0, float, minimum=0.0, strict=True)
    connect_timeout = _number("CONNECT_TIMEOUT_SECONDS", min(timeout, 5.0), float, minimum=0.0, strict=True)
    read_timeout = _number("READ_TIMEOUT_SECONDS", max(timeout, connect_timeout), float, minimum=0.0, strict=True)

    receipt_language = _text("RECEIPT_LANGUAGE", "es").lower()
    if receipt_language not in RECEIPT_LANGUAGES:
        raise ConfigError(
            f"Invalid {ENV_PREFIX}RECEIPT_LANGUAGE: expected one of {sorted(RECEIPT_LANGUAGES)}, "
            f"got {receipt_language!r}"
        )

    return ClientConfig(
        env_name=env_name,
        backend_url=backend_url.rstrip("/"),
        anon_key=anon_key,
        connect_timeout_seconds=connect_timeout,
        read_timeout_seconds=read_timeout,
        retries=_number("RETRIES", 3, int, minimum=0),
        retry_backoff_seconds=_number("RETRY_BACKOFF_SECONDS", 0.3, float, minimum=0.0),
        max_connections=_number("MAX_CONNECTIONS", 20, int, minimum=1),
        verify_ssl=_flag("VERIFY_SSL", True),
        stock_write_workers=_number("STOCK_WRITE_WORKERS", 4, int, minimum=1),
        guard_stock_writes=_flag("GUARD_STOCK_WRITES", False),
        catalog_limit=_number("CATALOG_LIMIT", 5, int, minimum=1),
        receipt_language=receipt_language,
    )
