from __future__ import annotations

from abc import ABC, abstractmethod


class IdStore(ABC):
    """Mapping of upstream incident id to ServiceNow sys_id.

    Bindings are write-once: put() over an existing key is a no-op.
    """

    @abstractmethod
    def get(self, incident_id: str) -> str | None:
        """Return the sys_id stored for incident_id, or None."""

    @abstractmethod
    def put(self, incident_id: str, sys_id: str) -> None:
        """Bind incident_id to sys_id unless it is already bound."""
