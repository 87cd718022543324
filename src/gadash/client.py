from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Mapping, Protocol

import httpx

from gadash.config import REPORTING_ENDPOINT

LOGGER = logging.getLogger(__name__)

ResponseCallback = Callable[[dict[str, Any]], Any]


def _error_payload(code: Any, message: str) -> dict[str, Any]:
    return {"error": {"code": code, "message": message}}


def _query_params(query: Mapping[str, Any]) -> dict[str, str]:
    params: dict[str, str] = {}
    for key, value in query.items():
        if value is None:
            continue
        params[key] = value.isoformat() if isinstance(value, date) else str(value)
    return params


class ReportingClient:
    """Authorized client for the analytics reporting API.

    ``execute`` always completes through its callback: HTTP and transport failures are
    delivered as ``{"error": {"code", "message"}}`` payloads instead of being raised.
    """

    def __init__(
        self,
        access_token: str,
        *,
        endpoint: str = REPORTING_ENDPOINT,
        api_key: str | None = None,
        timeout: float = 30.0,
        http: httpx.Client | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.api_key = api_key
        self._owns_http = http is None
        self._http = http or httpx.Client(timeout=timeout)
        self._headers = {"Authorization": f"Bearer {access_token}"}

    def __enter__(self) -> ReportingClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def fetch(self, query: Mapping[str, Any]) -> dict[str, Any]:
        params = _query_params(query)
        if self.api_key:
            params["key"] = self.api_key
        try:
            response = self._http.get(self.endpoint, params=params, headers=self._headers)
        except httpx.HTTPError as exc:
            LOGGER.warning("Reporting request failed: %s", exc)
            return _error_payload(0, str(exc))

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_success:
            if isinstance(payload, dict):
                return payload
            return _error_payload(response.status_code, "Response body is not a JSON object")

        LOGGER.warning("Reporting API returned HTTP %d", response.status_code)
        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            return payload
        return _error_payload(response.status_code, response.reason_phrase)

    def execute(self, query: Mapping[str, Any], callback: ResponseCallback) -> None:
        callback(self.fetch(query))


class ReportingService(Protocol):
    def execute(self, query: Mapping[str, Any], callback: ResponseCallback) -> None: ...
