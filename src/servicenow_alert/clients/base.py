from __future__ import annotations

from typing import Any

import httpx
import structlog

from servicenow_alert.core.errors import ResponseParseError, TransportError

logger = structlog.get_logger()


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300


class BaseHTTPClient:
    """Base HTTP client: one request per call, single timeout, no retries."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        auth: tuple[str, str] | None = None,
        proxy: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._auth = auth
        self._proxy = proxy
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        """Override to provide custom headers."""
        return {"Content-Type": "application/json"}

    def _client(self) -> httpx.Client:
        kwargs: dict[str, Any] = {"timeout": httpx.Timeout(self._timeout)}
        if self._auth:
            kwargs["auth"] = httpx.BasicAuth(*self._auth)
        if self._transport is not None:
            kwargs["transport"] = self._transport
        elif self._proxy:
            kwargs["proxy"] = self._proxy
        return httpx.Client(**kwargs)

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Execute one HTTP request; non-2xx and transport failures raise TransportError."""
        url = f"{self._base_url}{path}"
        req_headers = self._headers()
        if headers:
            req_headers.update(headers)

        try:
            with self._client() as client:
                response = client.request(method, url, json=json, headers=req_headers)
        except httpx.TimeoutException as exc:
            logger.error("http_timeout", method=method, url=url, timeout=self._timeout, error=str(exc))
            raise TransportError(
                "Request timed out", {"method": method, "url": url, "error": str(exc)}
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("http_network_error", method=method, url=url, error=str(exc))
            raise TransportError(
                "Request failed", {"method": method, "url": url, "error": str(exc)}
            ) from exc

        if not is_success_status(response.status_code):
            logger.error(
                "http_error_status",
                status=response.status_code,
                method=method,
                url=url,
                body=response.text[:500],
            )
            raise TransportError(
                f"HTTP {response.status_code}",
                {"method": method, "url": url, "status": response.status_code},
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise ResponseParseError(
                "Response did not contain JSON", {"status": response.status_code}
            ) from exc
        if not isinstance(data, dict):
            raise ResponseParseError("Response JSON is not an object", {"status": response.status_code})
        return data

    def post(
        self,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Execute POST request."""
        return self._request("POST", path, json=json, headers=headers)

    def put(
        self,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Execute PUT request."""
        return self._request("PUT", path, json=json, headers=headers)

    def patch(
        self,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Execute PATCH request."""
        return self._request("PATCH", path, json=json, headers=headers)
