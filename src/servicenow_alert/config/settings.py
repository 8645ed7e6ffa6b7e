"""
Typed settings for the ServiceNow integration.

Mirrors the YAML layout:

    serviceNow:
      host: dev12345.service-now.com
      port:
      protocol: https
      username: admin
      password: secret
      tablePath: /api/now/table/incident
      updateMethod: PUT
      timeout: 30
    proxy:
      host:
      port:
      username:
      password:
    fields:
      - name: assignment_group
        value: Service Desk
    closure:
      state: "6"
      close_code: Closed/Resolved by Caller
      close_notes: Closed by AppDynamics
    store:
      path:
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any
from urllib.parse import quote

DEFAULT_TABLE_PATH = "/api/now/table/incident"
DEFAULT_TIMEOUT = 30.0

# ServiceNow incident state 6 is "Resolved".
DEFAULT_CLOSURE_FIELDS: dict[str, str] = {
    "state": "6",
    "close_code": "Closed/Resolved by Caller",
    "close_notes": "Closed by AppDynamics",
}


class Protocol(StrEnum):
    HTTP = "http"
    HTTPS = "https"


class UpdateMethod(StrEnum):
    PUT = "PUT"
    PATCH = "PATCH"


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_int(value: Any, name: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass(frozen=True)
class Field:
    """A static field copied onto every incident payload."""

    name: str
    value: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Field:
        value = data.get("value")
        return cls(
            name=str(data.get("name") or ""),
            value="" if value is None else str(value),
        )


@dataclass(frozen=True)
class ServiceNowSettings:
    """Connection settings for the ServiceNow instance."""

    host: str
    port: int | None = None
    protocol: Protocol = Protocol.HTTPS
    username: str | None = None
    password: str | None = None
    table_path: str = DEFAULT_TABLE_PATH
    update_method: UpdateMethod = UpdateMethod.PUT
    timeout: float = DEFAULT_TIMEOUT

    @property
    def base_url(self) -> str:
        host = self.host.rstrip("/")
        if self.port:
            return f"{self.protocol}://{host}:{self.port}"
        return f"{self.protocol}://{host}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceNowSettings:
        host = _optional_str(data.get("host"))
        if not host:
            raise ValueError("serviceNow.host is required")
        timeout = data.get("timeout")
        return cls(
            host=host,
            port=_optional_int(data.get("port"), "serviceNow.port"),
            protocol=Protocol(str(data.get("protocol") or "https").lower()),
            username=_optional_str(data.get("username")),
            password=None if data.get("password") is None else str(data["password"]),
            table_path=_optional_str(data.get("tablePath")) or DEFAULT_TABLE_PATH,
            update_method=UpdateMethod(str(data.get("updateMethod") or "PUT").upper()),
            timeout=float(timeout) if timeout not in (None, "") else DEFAULT_TIMEOUT,
        )


@dataclass(frozen=True)
class ProxySettings:
    """Optional HTTP proxy, with its own credentials."""

    host: str | None = None
    port: int | None = None
    username: str | None = None
    password: str | None = None

    @property
    def url(self) -> str | None:
        if not self.host:
            return None
        host = self.host
        if "://" in host:
            scheme, host = host.split("://", 1)
        else:
            scheme = "http"
        auth = ""
        if self.username:
            auth = quote(self.username, safe="")
            if self.password:
                auth += ":" + quote(self.password, safe="")
            auth += "@"
        port = f":{self.port}" if self.port else ""
        return f"{scheme}://{auth}{host.rstrip('/')}{port}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProxySettings:
        return cls(
            host=_optional_str(data.get("host")),
            port=_optional_int(data.get("port"), "proxy.port"),
            username=_optional_str(data.get("username")),
            password=None if data.get("password") is None else str(data["password"]),
        )


@dataclass(frozen=True)
class Configuration:
    """Root configuration for one invocation."""

    service_now: ServiceNowSettings
    proxy: ProxySettings = field(default_factory=ProxySettings)
    fields: tuple[Field, ...] = ()
    closure_fields: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_CLOSURE_FIELDS))
    store_path: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Configuration:
        snow = data.get("serviceNow")
        if not isinstance(snow, dict):
            raise ValueError("serviceNow section is required")

        proxy = data.get("proxy") or {}
        if not isinstance(proxy, dict):
            raise ValueError("proxy must be a mapping")

        raw_fields = data.get("fields") or []
        if not isinstance(raw_fields, list):
            raise ValueError("fields must be a list of {name, value} entries")
        fields = tuple(
            Field.from_dict(item) for item in raw_fields if isinstance(item, dict) and item.get("name")
        )

        closure = data.get("closure")
        if closure is None:
            closure_fields = dict(DEFAULT_CLOSURE_FIELDS)
        elif isinstance(closure, dict):
            closure_fields = {str(k): "" if v is None else str(v) for k, v in closure.items()}
        else:
            raise ValueError("closure must be a mapping of field name to value")

        store = data.get("store") or {}
        store_path = _optional_str(store.get("path")) if isinstance(store, dict) else None

        return cls(
            service_now=ServiceNowSettings.from_dict(snow),
            proxy=ProxySettings.from_dict(proxy),
            fields=fields,
            closure_fields=closure_fields,
            store_path=store_path,
        )
