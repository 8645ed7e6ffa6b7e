from __future__ import annotations

from typing import Any

import httpx

from servicenow_alert.clients.base import BaseHTTPClient
from servicenow_alert.config.settings import (
    DEFAULT_TABLE_PATH,
    Configuration,
    UpdateMethod,
)
from servicenow_alert.core.errors import ResponseParseError


class ServiceNowClient(BaseHTTPClient):
    """Client for the ServiceNow incident table API."""

    def __init__(
        self,
        base_url: str,
        *,
        username: str | None = None,
        password: str | None = None,
        table_path: str = DEFAULT_TABLE_PATH,
        update_method: UpdateMethod = UpdateMethod.PUT,
        timeout: float = 30.0,
        proxy: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(
            base_url,
            timeout=timeout,
            auth=(username, password or "") if username else None,
            proxy=proxy,
            transport=transport,
        )
        self._table_path = "/" + table_path.strip("/")
        self._update_method = update_method

    @classmethod
    def from_config(cls, config: Configuration, **kwargs: Any) -> ServiceNowClient:
        snow = config.service_now
        return cls(
            snow.base_url,
            username=snow.username,
            password=snow.password,
            table_path=snow.table_path,
            update_method=snow.update_method,
            timeout=snow.timeout,
            proxy=config.proxy.url,
            **kwargs,
        )

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", "Accept": "application/json"}

    def create_incident(self, payload: dict[str, Any]) -> str:
        """Create an incident and return its sys_id."""
        response = self.post(self._table_path, json=payload)
        data = self._json(response)
        result = data.get("result")
        sys_id = result.get("sys_id") if isinstance(result, dict) else None
        if not isinstance(sys_id, str) or not sys_id:
            raise ResponseParseError(
                "Create response has no result.sys_id", {"status": response.status_code}
            )
        return sys_id

    def update_incident(self, sys_id: str, payload: dict[str, Any]) -> None:
        path = f"{self._table_path}/{sys_id}"
        if self._update_method is UpdateMethod.PATCH:
            self.patch(path, json=payload)
        else:
            self.put(path, json=payload)
