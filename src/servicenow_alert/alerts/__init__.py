from servicenow_alert.alerts.builder import (
    AlertBuilder,
    build_short_description,
    build_summary,
    get_impact,
)
from servicenow_alert.alerts.models import Alert

__all__ = ["Alert", "AlertBuilder", "build_short_description", "build_summary", "get_impact"]
