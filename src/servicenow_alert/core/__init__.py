"""Core modules for servicenow-alert - error taxonomy and exit codes."""

from servicenow_alert.core.errors import (
    ConfigurationError,
    DecodeError,
    ExitCode,
    ResponseParseError,
    ServiceNowAlertError,
    StoreError,
    StoreLockTimeout,
    TransportError,
    UnsupportedEventError,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "ServiceNowAlertError",
    "ConfigurationError",
    "DecodeError",
    "UnsupportedEventError",
    "StoreError",
    "StoreLockTimeout",
    "TransportError",
    "ResponseParseError",
    "main_with_error_handling",
]
