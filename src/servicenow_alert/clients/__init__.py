from servicenow_alert.clients.base import BaseHTTPClient
from servicenow_alert.clients.handler import HttpHandler
from servicenow_alert.clients.servicenow import ServiceNowClient

__all__ = ["BaseHTTPClient", "HttpHandler", "ServiceNowClient"]
