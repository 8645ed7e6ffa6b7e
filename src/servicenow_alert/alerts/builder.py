"""
Translate a health rule violation into a ServiceNow incident payload.

The comments body is what operators read on the incident, so its layout is
kept stable line for line.
"""

from __future__ import annotations

from typing import Iterable

from servicenow_alert.alerts.models import Alert
from servicenow_alert.config.settings import Field
from servicenow_alert.events.models import HealthRuleViolationEvent, TriggerCondition

NEW_LINE = "\n"

IMPACT_BY_SEVERITY = {
    "ERROR": "1",
    "WARN": "2",
}
DEFAULT_IMPACT = "3"


def get_impact(severity: str | None) -> str:
    """Map monitoring severity onto ServiceNow impact (1 high .. 3 low)."""
    return IMPACT_BY_SEVERITY.get(severity or "", DEFAULT_IMPACT)


def build_short_description(event: HealthRuleViolationEvent) -> str:
    return f"Policy {event.health_rule_name} for {event.affected_entity_name} violated"


def build_summary(event: HealthRuleViolationEvent) -> str:
    lines = [
        f"Application Name:{event.app_name}",
        f"Policy Violation Alert Time:{event.pvn_alert_time}",
        f"Severity:{event.severity}",
        f"Name of Violated Policy:{event.health_rule_name}",
        f"Affected Entity Type:{event.affected_entity_type}",
        f"Name of Affected Entity:{event.affected_entity_name}",
    ]

    for i, entity in enumerate(event.evaluation_entities, start=1):
        lines.append(f"EVALUATION ENTITY #{i}:")
        lines.append(f"Evaluation Entity:{entity.type}")
        lines.append(f"Evaluation Entity Name:{entity.name}")

        for j, condition in enumerate(entity.triggered_conditions, start=1):
            lines.extend(_condition_lines(j, condition))
            # Repeated per condition, not once per event.
            lines.append(f"Incident URL:{event.incident_url}")

    return NEW_LINE.join(lines)


def _condition_lines(index: int, condition: TriggerCondition) -> list[str]:
    lines = [
        f"Triggered Condition #{index}:",
        "",
        f"Scope Type:{condition.scope_type}",
        f"Scope Name:{condition.scope_name}",
    ]
    if condition.is_baseline:
        lines.append(f"Is Default Baseline?{'true' if condition.use_default_baseline else 'false'}")
        if not condition.use_default_baseline:
            lines.append(f"Baseline Name:{condition.baseline_name}")
    lines.append(f"{condition.condition_name}{condition.operator}{condition.threshold_value}")
    lines.append(f"Violation Value:{condition.observed_value}")
    lines.append("")
    return lines


class AlertBuilder:
    """Builds Alert payloads, adding the configured static fields."""

    def __init__(self, fields: Iterable[Field] = ()) -> None:
        self._fields = tuple(fields)

    def build(self, event: HealthRuleViolationEvent) -> Alert:
        alert = Alert(
            impact=get_impact(event.severity),
            priority=event.priority,
            short_description=build_short_description(event),
            comments=build_summary(event),
        )
        for configured in self._fields:
            if configured.value:
                alert.add_dynamic_property(configured.name, configured.value)
        return alert
