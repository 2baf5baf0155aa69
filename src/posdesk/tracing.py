from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Mapping

TRACE_HEADER = "X-Request-Id"
# A gateway-assigned id replaces the one sent with the request.
RESPONSE_TRACE_HEADERS = ("sb-request-id", TRACE_HEADER)


def new_trace_id() -> str:
    return uuid.uuid4().hex


@dataclass
class TraceContext:
    """Correlation id shared by every call a session makes."""

    trace_id: str | None = None

    def ensure(self) -> str:
        if not self.trace_id:
            self.trace_id = new_trace_id()
        return self.trace_id

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        found = next((headers.get(name) for name in RESPONSE_TRACE_HEADERS if headers.get(name)), None)
        if found:
            self.trace_id = found
