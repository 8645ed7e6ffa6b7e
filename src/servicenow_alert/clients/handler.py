"""
Create-or-update dispatch against ServiceNow.

The handler reports success as a bool and logs the cause of any failure.
Only a successful create writes the incident binding to the id store.
"""

from __future__ import annotations

import structlog

from servicenow_alert.alerts.models import Alert
from servicenow_alert.clients.servicenow import ServiceNowClient
from servicenow_alert.config.settings import Configuration
from servicenow_alert.core.errors import StoreLockTimeout, TransportError
from servicenow_alert.store.base import IdStore

logger = structlog.get_logger()


class HttpHandler:
    def __init__(
        self,
        config: Configuration,
        store: IdStore,
        client: ServiceNowClient | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._client = client or ServiceNowClient.from_config(config)

    def post_alert(self, alert: Alert, incident_id: str) -> bool:
        try:
            sys_id = self._client.create_incident(alert.to_payload())
        except TransportError as e:
            logger.error(
                "incident_create_failed",
                incident_id=incident_id,
                error_type=type(e).__name__,
                message=e.message,
                **e.details,
            )
            return False

        logger.info("incident_created", incident_id=incident_id, sys_id=sys_id)
        try:
            self._store.put(incident_id, sys_id)
        except StoreLockTimeout as e:
            # The incident exists remotely; the next event for it will create a duplicate.
            logger.warning(
                "store_lock_timeout",
                incident_id=incident_id,
                sys_id=sys_id,
                message=e.message,
                **e.details,
            )
        return True

    def update_alert(self, alert: Alert, incident_id: str, sys_id: str, close: bool) -> bool:
        payload = alert.to_payload()
        if close:
            payload.update(self._config.closure_fields)

        try:
            self._client.update_incident(sys_id, payload)
        except TransportError as e:
            logger.error(
                "incident_update_failed",
                incident_id=incident_id,
                sys_id=sys_id,
                close=close,
                error_type=type(e).__name__,
                message=e.message,
                **e.details,
            )
            return False

        logger.info(
            "incident_closed" if close else "incident_updated",
            incident_id=incident_id,
            sys_id=sys_id,
        )
        return True
