from servicenow_alert.events.decoder import decode_event, is_health_rule_violation, parse_count
from servicenow_alert.events.models import (
    EvaluationEntity,
    Event,
    EventSummary,
    EventTypeCount,
    HealthRuleViolationEvent,
    OtherEvent,
    TriggerCondition,
)

__all__ = [
    "decode_event",
    "is_health_rule_violation",
    "parse_count",
    "Event",
    "EvaluationEntity",
    "EventSummary",
    "EventTypeCount",
    "HealthRuleViolationEvent",
    "OtherEvent",
    "TriggerCondition",
]
