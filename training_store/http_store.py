"""
HTTP client for the training service.

Exposes the same create/read/update/delete/list operations as RecordStore but
makes HTTP calls to the distributed training service. Every transport or HTTP
failure is raised as PersistenceError.
"""
from __future__ import annotations

import typing as t

import httpx

from agenda_builder.config import STANDARD_TIMEOUT, TRAINING_SERVICE_URL
from agenda_builder.errors import PersistenceError


Record = dict[str, t.Any]


class HttpRecordStore:
    """RecordStore-compatible client for the training service REST API."""

    def __init__(
        self,
        base_url: str = TRAINING_SERVICE_URL,
        timeout: float = STANDARD_TIMEOUT,
        transport: t.Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _request(self, method: str, path: str, **kwargs: t.Any) -> httpx.Response:
        try:
            with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self._transport) as client:
                response = client.request(method, path, **kwargs)
                response.raise_for_status()
                return response
        except httpx.TimeoutException:
            raise PersistenceError(f"{method} {path} timed out after {self.timeout} seconds")
        except httpx.HTTPStatusError as e:
            raise PersistenceError(
                f"HTTP error from training service: {e.response.status_code} {e.response.text}",
                status_code=e.response.status_code,
            )
        except httpx.HTTPError as e:
            raise PersistenceError(f"Error calling training service: {e}")

    def create(self, table: str, record: t.Mapping[str, t.Any]) -> Record:
        return self._request("POST", f"/{table}", json=dict(record)).json()

    def read(self, table: str, record_id: str) -> t.Optional[Record]:
        """Return the record, or None when the service answers 404."""
        try:
            return self._request("GET", f"/{table}/{record_id}").json()
        except PersistenceError as e:
            if e.status_code == 404:
                return None
            raise

    def update(self, table: str, record_id: str, patch: t.Mapping[str, t.Any]) -> Record:
        return self._request("PATCH", f"/{table}/{record_id}", json=dict(patch)).json()

    def delete(self, table: str, record_id: str) -> None:
        self._request("DELETE", f"/{table}/{record_id}")

    def list(self, table: str, order_by: str = "created_at", descending: bool = True) -> list[Record]:
        params = {"order_by": order_by, "descending": str(descending).lower()}
        return self._request("GET", f"/{table}", params=params).json()
