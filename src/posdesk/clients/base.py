from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..http_client import HttpClient

SINGLE_OBJECT = "application/vnd.pgrst.object+json"
RETURN_REPRESENTATION = "return=representation"
RETURN_MINIMAL = "return=minimal"


@dataclass
class BaseClient:
    http: HttpClient
    access_token: str | None = None

    def _auth_headers(self) -> dict[str, str]:
        anon_key = self.http.config.anon_key
        return {
            "apikey": anon_key,
            "Authorization": f"Bearer {self.access_token or anon_key}",
        }

    def _request(self, method: str, path: str, **kwargs):
        headers = kwargs.pop("headers", {})
        merged = {**self._auth_headers(), **headers}
        return self.http.request(method, path, headers=merged, **kwargs)


@dataclass
class TableClient(BaseClient):
    table: str = ""

    @property
    def _path(self) -> str:
        return f"{self.http.config.rest_path}/{self.table}"

    def _select(self, params: dict[str, str], *, single: bool = False, operation: str = "select") -> Any:
        headers = {"Accept": SINGLE_OBJECT} if single else {}
        return self._request(
            "GET",
            self._path,
            params=params,
            headers=headers,
            table=self.table,
            operation=operation,
        )

    def _insert(self, body: dict[str, Any] | list[Any], *, returning: bool = True, operation: str = "insert", prefer: str | None = None) -> Any:
        preferences = [RETURN_REPRESENTATION if returning else RETURN_MINIMAL]
        if prefer:
            preferences.append(prefer)
        return self._request(
            "POST",
            self._path,
            json_body=body,
            headers={"Prefer": ",".join(preferences)},
            table=self.table,
            operation=operation,
        )

    def _update(self, filters: dict[str, str], body: dict[str, Any], *, operation: str = "update") -> Any:
        return self._request(
            "PATCH",
            self._path,
            params=filters,
            json_body=body,
            headers={"Prefer": RETURN_REPRESENTATION},
            table=self.table,
            operation=operation,
        )

    def _delete(self, filters: dict[str, str], *, operation: str = "delete") -> Any:
        return self._request(
            "DELETE",
            self._path,
            params=filters,
            headers={"Prefer": RETURN_MINIMAL},
            table=self.table,
            operation=operation,
        )


def eq(value: object) -> str:
    return f"eq.{value}"
