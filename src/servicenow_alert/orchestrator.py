"""
Event processing for one invocation.

Decision table, keyed on the event shape, the id store lookup and the event
type:

- not a health rule violation: warn and fail (UnsupportedEventError)
- violation, no stored sys_id: create the incident
- violation, stored sys_id, open/upgrade/downgrade event: update it
- violation, stored sys_id, POLICY_CLOSE* or POLICY_CANCELED*: update and close it
"""

from __future__ import annotations

from enum import StrEnum
from typing import Sequence

import structlog

from servicenow_alert.alerts.builder import AlertBuilder
from servicenow_alert.clients.handler import HttpHandler
from servicenow_alert.config.settings import Configuration
from servicenow_alert.core.errors import UnsupportedEventError
from servicenow_alert.events.decoder import decode_event
from servicenow_alert.events.models import HealthRuleViolationEvent
from servicenow_alert.logging import bind_context
from servicenow_alert.store.base import IdStore

logger = structlog.get_logger()

POLICY_CLOSE = "POLICY_CLOSE"
POLICY_CANCELED = "POLICY_CANCELED"


class Action(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    CLOSE = "close"


def should_resolve_event(event_type: str | None) -> bool:
    return event_type is not None and (
        event_type.startswith(POLICY_CLOSE) or event_type.startswith(POLICY_CANCELED)
    )


def decide_action(sys_id: str | None, event_type: str | None) -> Action:
    if not sys_id:
        return Action.CREATE
    if should_resolve_event(event_type):
        return Action.CLOSE
    return Action.UPDATE


class AlertProcessor:
    """Turns one argument vector into one ServiceNow create or update call."""

    def __init__(
        self,
        config: Configuration,
        store: IdStore,
        handler: HttpHandler | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._builder = AlertBuilder(config.fields)
        self._handler = handler or HttpHandler(config, store)

    def process(self, args: Sequence[str]) -> bool:
        """
        Process an argument vector.

        Returns:
            True when the remote create/update succeeded

        Raises:
            DecodeError: the vector does not match a known template
            UnsupportedEventError: the event is not a health rule violation
            StoreError: the id store could not be read
        """
        event = decode_event(args)
        if not isinstance(event, HealthRuleViolationEvent):
            raise UnsupportedEventError(
                "This extension only handles health rule violation events; skipping",
                {"event_name": event.en_name, "app_name": event.app_name},
            )
        return self.process_violation(event)

    def process_violation(self, event: HealthRuleViolationEvent) -> bool:
        bind_context(incident_id=event.incident_id, event_type=event.event_type)

        alert = self._builder.build(event)
        sys_id = self._store.get(event.incident_id)
        action = decide_action(sys_id, event.event_type)
        logger.debug("dispatching_event", action=str(action), sys_id=sys_id)

        if action is Action.CREATE or not sys_id:
            return self._handler.post_alert(alert, event.incident_id)
        return self._handler.update_alert(
            alert, event.incident_id, sys_id, close=action is Action.CLOSE
        )
