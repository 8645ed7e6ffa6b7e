from __future__ import annotations

from servicenow_alert.store.base import IdStore


class MemoryIdStore(IdStore):
    """In-process id store for tests and dry runs."""

    def __init__(self, bindings: dict[str, str] | None = None) -> None:
        self._bindings: dict[str, str] = dict(bindings or {})

    def get(self, incident_id: str) -> str | None:
        return self._bindings.get(incident_id)

    def put(self, incident_id: str, sys_id: str) -> None:
        self._bindings.setdefault(incident_id, sys_id)

    def items(self) -> dict[str, str]:
        return dict(self._bindings)
