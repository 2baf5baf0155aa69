"""Structured outcome events for sign-in, navigation and checkout.

Events are appended to a JSON-lines file (and optionally echoed to a stream)
only when telemetry is switched on with ``POSDESK_TELEMETRY_ENABLED`` or the
``enabled`` argument. Context values must not identify a person, so context
keys that usually carry personal data are refused when the event is built.
"""

from __future__ import annotations

import json
import os
import sys
import threading
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

TELEMETRY_CATEGORIES = frozenset({"auth", "navigation", "checkout", "api_call_result", "error", "permission_denied"})
PII_CONTEXT_KEYS = frozenset(
    {"email", "password", "username", "full_name", "phone", "token", "access_token", "authorization", "card_number"}
)
ENABLE_ENV_VAR = "POSDESK_TELEMETRY_ENABLED"


@dataclass(frozen=True)
class TelemetryEvent:
    category: str
    name: str
    module: str
    action: str
    timestamp_utc: str
    trace_id: str | None = None
    duration_ms: int | None = None
    success: bool | None = None
    error_code: str | None = None
    context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        values = {item.name: getattr(self, item.name) for item in fields(self)}
        return {key: value for key, value in values.items() if value is not None}


def build_event(
    *,
    category: str,
    name: str,
    module: str,
    action: str,
    trace_id: str | None = None,
    duration_ms: int | None = None,
    success: bool | None = None,
    error_code: str | None = None,
    context: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> TelemetryEvent:
    if category not in TELEMETRY_CATEGORIES:
        raise ValueError(f"Unsupported telemetry category: {category}")
    pii = sorted(key for key in (context or {}) if key.lower() in PII_CONTEXT_KEYS)
    if pii:
        raise ValueError(f"PII-like keys are forbidden in telemetry context: {pii}")
    return TelemetryEvent(
        category=category,
        name=name,
        module=module,
        action=action,
        timestamp_utc=(now or datetime.now(timezone.utc)).isoformat(),
        trace_id=trace_id,
        duration_ms=duration_ms,
        success=success,
        error_code=error_code,
        context=dict(context) if context else None,
    )


class TelemetryLogger:
    def __init__(
        self,
        *,
        app_name: str = "posdesk",
        enabled: bool | None = None,
        log_file: str | Path | None = None,
        stdout_sink: bool = False,
        stdout_stream: TextIO | None = None,
    ) -> None:
        self.app_name = app_name
        self.enabled = _enabled_from_env() if enabled is None else enabled
        self.log_file = Path(log_file) if log_file else Path("artifacts", "telemetry", f"{app_name}.jsonl")
        self.stdout_sink = stdout_sink
        self.stdout_stream = stdout_stream
        self._lock = threading.Lock()

    def emit(self, event: TelemetryEvent) -> bool:
        """Record ``event``; returns False when telemetry is off."""
        if not self.enabled:
            return False
        line = json.dumps({**event.to_dict(), "app_name": self.app_name}, sort_keys=True, default=str) + "\n"
        with self._lock:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            with self.log_file.open("a", encoding="utf-8") as fp:
                fp.write(line)
            if self.stdout_sink:
                stream = self.stdout_stream or sys.stdout
                stream.write(line)
                stream.flush()
        return True


def _enabled_from_env() -> bool:
    return os.getenv(ENABLE_ENV_VAR, "").strip().lower() in {"1", "true", "yes", "on"}
