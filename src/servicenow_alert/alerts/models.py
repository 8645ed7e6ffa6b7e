from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Alert:
    """ServiceNow incident payload."""

    impact: str
    priority: str
    short_description: str
    comments: str
    dynamic_properties: dict[str, str] = field(default_factory=dict)

    def add_dynamic_property(self, name: str, value: str) -> None:
        self.dynamic_properties[name] = value

    def to_payload(self) -> dict[str, Any]:
        """JSON body with the dynamic properties spliced in at the top level."""
        payload: dict[str, Any] = {
            "short_description": self.short_description,
            "comments": self.comments,
            "impact": self.impact,
            "priority": self.priority,
        }
        payload.update(self.dynamic_properties)
        return payload
