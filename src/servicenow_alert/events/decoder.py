"""
Decoder for the positional argument vector of an AppDynamics custom action.

The controller renders one of two templates. A health rule violation carries

    APP_NAME APP_ID PVN_ALERT_TIME PRIORITY SEVERITY TAG
    HEALTH_RULE_NAME HEALTH_RULE_ID PVN_TIME_PERIOD_IN_MINUTES
    AFFECTED_ENTITY_TYPE AFFECTED_ENTITY_NAME AFFECTED_ENTITY_ID
    NUMBER_OF_EVALUATION_ENTITIES
      { TYPE NAME ID NUMBER_OF_TRIGGERED_CONDITIONS
        { SCOPE_TYPE SCOPE_NAME SCOPE_ID CONDITION_NAME CONDITION_ID OPERATOR
          CONDITION_UNIT_TYPE [USE_DEFAULT_BASELINE [BASELINE_NAME BASELINE_ID]]
          THRESHOLD_VALUE OBSERVED_VALUE } }
    SUMMARY_MESSAGE INCIDENT_ID DEEP_LINK_URL EVENT_TYPE ACCOUNT_NAME ACCOUNT_ID

and every other event carries

    APP_NAME APP_ID EN_TIME PRIORITY SEVERITY TAG EN_NAME EN_ID EN_INTERVAL_IN_MINUTES
    NUMBER_OF_EVENT_TYPES { EVENT_TYPE EVENT_TYPE_NUM }
    NUMBER_OF_EVENT_SUMMARIES { ID TIME TYPE SEVERITY STRING }
    DEEP_LINK_URL ACCOUNT_NAME ACCOUNT_ID

The two are told apart by the slot third from the end: EVENT_TYPE on a
violation (always POLICY_*), the deep link URL otherwise.
"""

from __future__ import annotations

from typing import Sequence

import structlog

from servicenow_alert.core.errors import DecodeError
from servicenow_alert.events.models import (
    EvaluationEntity,
    Event,
    EventSummary,
    EventTypeCount,
    HealthRuleViolationEvent,
    OtherEvent,
    TriggerCondition,
)

logger = structlog.get_logger()

POLICY_EVENT_PREFIX = "POLICY_"

# Fixed slots before the first count, and fixed trailing slots.
_HRV_HEADER_SLOTS = 12
_HRV_TRAILER_SLOTS = 6
_OTHER_HEADER_SLOTS = 9
_OTHER_TRAILER_SLOTS = 3


class _ArgCursor:
    """Sequential reader over the argument vector."""

    def __init__(self, args: Sequence[str], end: int) -> None:
        self._args = args
        self._end = end
        self.pos = 0

    def next(self, slot: str) -> str:
        if self.pos >= self._end:
            raise DecodeError(
                "Argument vector ended early",
                {"slot": slot, "position": self.pos, "length": len(self._args)},
            )
        value = self._args[self.pos]
        self.pos += 1
        return "" if value is None else str(value)

    def count(self, slot: str) -> int:
        raw = self.next(slot)
        return parse_count(raw, slot=slot, position=self.pos - 1)


def parse_count(raw: str, *, slot: str = "count", position: int | None = None) -> int:
    """Parse a non-negative integer count slot."""
    text = raw.strip()
    if not (text.isascii() and text.isdigit()):
        raise DecodeError(
            "Count slot is not a non-negative integer",
            {"slot": slot, "position": position, "value": raw},
        )
    return int(text)


def is_health_rule_violation(args: Sequence[str]) -> bool:
    """True when the discriminator slot holds a POLICY_* event type."""
    if len(args) < _HRV_HEADER_SLOTS + 1 + _HRV_TRAILER_SLOTS:
        return False
    return str(args[-3]).strip().startswith(POLICY_EVENT_PREFIX)


def decode_event(args: Sequence[str]) -> Event:
    """
    Decode an argument vector into an event.

    Raises:
        DecodeError: if the vector is empty, too short, has a bad count slot
            or its length does not match what its counts imply
    """
    if not args:
        raise DecodeError("No arguments received")

    if is_health_rule_violation(args):
        event = _decode_health_rule_violation(args)
        logger.debug("decoded_event", kind="health_rule_violation", incident_id=event.incident_id)
        return event

    if len(args) < _OTHER_HEADER_SLOTS + 2 + _OTHER_TRAILER_SLOTS:
        raise DecodeError(
            "Argument vector too short for any known event template",
            {"length": len(args)},
        )
    event = _decode_other_event(args)
    logger.debug("decoded_event", kind="other", event_name=event.en_name)
    return event


def _decode_health_rule_violation(args: Sequence[str]) -> HealthRuleViolationEvent:
    cursor = _ArgCursor(args, len(args) - _HRV_TRAILER_SLOTS)

    header = [cursor.next(slot) for slot in (
        "APP_NAME",
        "APP_ID",
        "PVN_ALERT_TIME",
        "PRIORITY",
        "SEVERITY",
        "TAG",
        "HEALTH_RULE_NAME",
        "HEALTH_RULE_ID",
        "PVN_TIME_PERIOD_IN_MINUTES",
        "AFFECTED_ENTITY_TYPE",
        "AFFECTED_ENTITY_NAME",
        "AFFECTED_ENTITY_ID",
    )]

    entities = []
    for _ in range(cursor.count("NUMBER_OF_EVALUATION_ENTITIES")):
        entity_type = cursor.next("EVALUATION_ENTITY_TYPE")
        entity_name = cursor.next("EVALUATION_ENTITY_NAME")
        entity_id = cursor.next("EVALUATION_ENTITY_ID")
        conditions = tuple(
            _decode_trigger_condition(cursor)
            for _ in range(cursor.count("NUMBER_OF_TRIGGERED_CONDITIONS_PER_EVALUATION_ENTITY"))
        )
        entities.append(EvaluationEntity(entity_type, entity_name, entity_id, conditions))

    if cursor.pos != len(args) - _HRV_TRAILER_SLOTS:
        raise DecodeError(
            "Argument vector length does not match its entity counts",
            {"consumed": cursor.pos, "length": len(args)},
        )

    trailer = [str(value) for value in args[-_HRV_TRAILER_SLOTS:]]
    summary_message, incident_id, deep_link_url, event_type, account_name, account_id = trailer

    return HealthRuleViolationEvent(
        *header,
        evaluation_entities=tuple(entities),
        summary_message=summary_message,
        incident_id=incident_id,
        deep_link_url=deep_link_url,
        event_type=event_type,
        account_name=account_name,
        account_id=account_id,
    )


def _decode_trigger_condition(cursor: _ArgCursor) -> TriggerCondition:
    scope_type = cursor.next("SCOPE_TYPE")
    scope_name = cursor.next("SCOPE_NAME")
    scope_id = cursor.next("SCOPE_ID")
    condition_name = cursor.next("CONDITION_NAME")
    condition_id = cursor.next("CONDITION_ID")
    operator = cursor.next("OPERATOR")
    unit_type = cursor.next("CONDITION_UNIT_TYPE")

    use_default_baseline = False
    baseline_name = ""
    baseline_id = ""
    if unit_type.upper().startswith("BASELINE"):
        use_default_baseline = cursor.next("USE_DEFAULT_BASELINE").strip().lower() == "true"
        if not use_default_baseline:
            baseline_name = cursor.next("BASELINE_NAME")
            baseline_id = cursor.next("BASELINE_ID")

    return TriggerCondition(
        scope_type=scope_type,
        scope_name=scope_name,
        scope_id=scope_id,
        condition_name=condition_name,
        condition_id=condition_id,
        operator=operator,
        condition_unit_type=unit_type,
        threshold_value=cursor.next("THRESHOLD_VALUE"),
        observed_value=cursor.next("OBSERVED_VALUE"),
        use_default_baseline=use_default_baseline,
        baseline_name=baseline_name,
        baseline_id=baseline_id,
    )


def _decode_other_event(args: Sequence[str]) -> OtherEvent:
    cursor = _ArgCursor(args, len(args) - _OTHER_TRAILER_SLOTS)

    header = [cursor.next(slot) for slot in (
        "APP_NAME",
        "APP_ID",
        "EN_TIME",
        "PRIORITY",
        "SEVERITY",
        "TAG",
        "EN_NAME",
        "EN_ID",
        "EN_INTERVAL_IN_MINUTES",
    )]

    event_types = []
    for _ in range(cursor.count("NUMBER_OF_EVENT_TYPES")):
        event_type = cursor.next("EVENT_TYPE")
        event_types.append(EventTypeCount(event_type, cursor.count("EVENT_TYPE_NUM")))

    summaries = [
        EventSummary(
            id=cursor.next("EVENT_SUMMARY_ID"),
            time=cursor.next("EVENT_SUMMARY_TIME"),
            type=cursor.next("EVENT_SUMMARY_TYPE"),
            severity=cursor.next("EVENT_SUMMARY_SEVERITY"),
            summary=cursor.next("EVENT_SUMMARY_STRING"),
        )
        for _ in range(cursor.count("NUMBER_OF_EVENT_SUMMARIES"))
    ]

    if cursor.pos != len(args) - _OTHER_TRAILER_SLOTS:
        raise DecodeError(
            "Argument vector length does not match its event counts",
            {"consumed": cursor.pos, "length": len(args)},
        )

    deep_link_url, account_name, account_id = (str(value) for value in args[-_OTHER_TRAILER_SLOTS:])

    return OtherEvent(
        *header,
        event_types=tuple(event_types),
        event_summaries=tuple(summaries),
        deep_link_url=deep_link_url,
        account_name=account_name,
        account_id=account_id,
    )
