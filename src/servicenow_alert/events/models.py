"""Event types produced by the argument decoder.

An event is either a HealthRuleViolationEvent or an OtherEvent; callers
branch on the concrete type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class TriggerCondition:
    scope_type: str
    scope_name: str
    scope_id: str
    condition_name: str
    condition_id: str
    operator: str
    condition_unit_type: str
    threshold_value: str
    observed_value: str
    use_default_baseline: bool = False
    baseline_name: str = ""
    baseline_id: str = ""

    @property
    def is_baseline(self) -> bool:
        return bool(self.condition_unit_type) and self.condition_unit_type.upper().startswith("BASELINE")


@dataclass(frozen=True)
class EvaluationEntity:
    type: str
    name: str
    id: str
    triggered_conditions: tuple[TriggerCondition, ...] = ()


@dataclass(frozen=True)
class HealthRuleViolationEvent:
    """A policy breach, opened, upgraded, downgraded, closed or canceled."""

    app_name: str
    app_id: str
    pvn_alert_time: str
    priority: str
    severity: str
    tag: str
    health_rule_name: str
    health_rule_id: str
    pvn_time_period_in_minutes: str
    affected_entity_type: str
    affected_entity_name: str
    affected_entity_id: str
    evaluation_entities: tuple[EvaluationEntity, ...] = ()
    summary_message: str = ""
    incident_id: str = ""
    deep_link_url: str = ""
    event_type: str = ""
    account_name: str = ""
    account_id: str = ""

    @property
    def incident_url(self) -> str:
        # The controller expects the incident id appended to the deep link.
        return f"{self.deep_link_url}{self.incident_id}"


@dataclass(frozen=True)
class EventTypeCount:
    event_type: str
    count: int


@dataclass(frozen=True)
class EventSummary:
    id: str
    time: str
    type: str
    severity: str
    summary: str


@dataclass(frozen=True)
class OtherEvent:
    """Any non-policy event notification (errors, code problems, app changes...)."""

    app_name: str
    app_id: str
    en_time: str
    priority: str
    severity: str
    tag: str
    en_name: str
    en_id: str
    en_interval_in_minutes: str
    event_types: tuple[EventTypeCount, ...] = ()
    event_summaries: tuple[EventSummary, ...] = field(default_factory=tuple)
    deep_link_url: str = ""
    account_name: str = ""
    account_id: str = ""


Event = Union[HealthRuleViolationEvent, OtherEvent]
