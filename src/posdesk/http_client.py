from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .error_mapper import map_error
from .exceptions import TransportError
from .tracing import TRACE_HEADER, TraceContext

logger = logging.getLogger(__name__)

JsonBody = dict[str, Any] | list[Any]
IDEMPOTENT_METHODS = frozenset({"GET", "HEAD"})


@dataclass(frozen=True)
class CallRecord:
    """Outcome of the most recent backend call, kept for diagnostics."""

    table: str
    operation: str
    duration_ms: int
    ok: bool
    status_code: int
    trace_id: str | None


@dataclass
class HttpClient:
    config: ClientConfig
    trace: TraceContext | None = None
    session: requests.Session | None = None
    last_call: CallRecord | None = None

    def __post_init__(self) -> None:
        if self.trace is None:
            self.trace = TraceContext()
        if self.session is None:
            self.session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
            )
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

    def url_for(self, path: str) -> str:
        return urljoin(self.config.backend_url.rstrip("/") + "/", path.lstrip("/"))

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: JsonBody | None = None,
        params: dict[str, Any] | None = None,
        table: str = "-",
        operation: str = "-",
    ) -> dict[str, Any] | list[Any] | None:
        """Send one backend call and return its decoded JSON body.

        Only GET and HEAD are retried, on transport failures and 5xx answers.
        Error answers are raised as the matching ``ApiError`` subclass.
        """
        verb = method.upper()
        sent_headers = {"Accept": "application/json", **(headers or {})}
        sent_headers[TRACE_HEADER] = self.trace.ensure()
        attempts = self.config.retries + 1 if verb in IDEMPOTENT_METHODS else 1

        started = time.monotonic()
        response: requests.Response | None = None
        for attempt in range(1, attempts + 1):
            try:
                response = self._send(verb, path, sent_headers, json_body, params)
            except requests.RequestException as exc:
                if attempt == attempts:
                    self._record(table, operation, started, 0)
                    raise TransportError(
                        code="TRANSPORT_ERROR",
                        message=str(exc),
                        details={"type": type(exc).__name__},
                        trace_id=self.trace.trace_id,
                        status_code=0,
                    ) from exc
                logger.warning(
                    "backend_retry",
                    extra={"table": table, "operation": operation, "attempt": attempt, "reason": type(exc).__name__},
                )
            else:
                if response.status_code < 500 or attempt == attempts:
                    break
                logger.warning(
                    "backend_retry",
                    extra={"table": table, "operation": operation, "attempt": attempt, "reason": response.status_code},
                )
            time.sleep(self.config.retry_backoff_seconds * (2 ** (attempt - 1)))

        self.trace.update_from_headers(response.headers)
        self._record(table, operation, started, response.status_code)
        if response.ok:
            return response.json() if response.content else None
        raise map_error(response.status_code, _error_body(response), self.trace.trace_id)

    def _send(
        self,
        verb: str,
        path: str,
        headers: dict[str, str],
        json_body: JsonBody | None,
        params: dict[str, Any] | None,
    ) -> requests.Response:
        return self.session.request(
            method=verb,
            url=self.url_for(path),
            headers=headers,
            json=json_body,
            params=params,
            timeout=(self.config.connect_timeout_seconds, self.config.read_timeout_seconds),
            verify=self.config.verify_ssl,
        )

    def _record(self, table: str, operation: str, started: float, status_code: int) -> None:
        self.last_call = CallRecord(
            table=table,
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            ok=200 <= status_code < 400,
            status_code=status_code,
            trace_id=self.trace.trace_id,
        )
        logger.debug(
            "backend_call",
            extra={"table": table, "operation": operation, "status": status_code, "duration_ms": self.last_call.duration_ms},
        )


def _error_body(response: requests.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except (json.JSONDecodeError, ValueError):
        return {"message": response.text}
    return payload if isinstance(payload, dict) else {"message": str(payload)}
