"""
Unified error handling for the servicenow-alert command.

Every failure the command can hit is a ServiceNowAlertError subclass that
carries its own exit code, so the entry point only has to catch one family.

Exit Codes:
- 0: Success
- 1: Failure (the remote call was made and did not succeed)
- 3: Unsupported event (decoded fine, but not a health rule violation)
- 10: Configuration error
- 11: Transport error (network, TLS, proxy, non-2xx, unparseable response)
- 12: Decode error (argument vector does not match the template contract)
- 13: Store error (id store I/O or lock failure)
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import logging
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Process exit codes for the servicenow-alert command."""

    SUCCESS = 0
    FAILURE = 1
    UNSUPPORTED_EVENT = 3
    CONFIG_ERROR = 10
    DECODE_ERROR = 12
    STORE_ERROR = 13
    UNKNOWN_ERROR = 127


class ServiceNowAlertError(Exception):
    """Base exception for servicenow-alert errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    log_level: int = logging.ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ServiceNowAlertError):
    """Raised when the config file is missing, unreadable or incomplete."""

    exit_code = ExitCode.CONFIG_ERROR


class DecodeError(ServiceNowAlertError):
    """Raised when the argument vector cannot be parsed into an event."""

    exit_code = ExitCode.DECODE_ERROR


class UnsupportedEventError(ServiceNowAlertError):
    """Raised for well-formed events that are not health rule violations."""

    exit_code = ExitCode.UNSUPPORTED_EVENT
    log_level = logging.WARNING


class StoreError(ServiceNowAlertError):
    """Raised when the id store cannot be read or written."""

    exit_code = ExitCode.STORE_ERROR


class StoreLockTimeout(StoreError):
    """Raised when the id store lock is not acquired in time."""


class TransportError(ServiceNowAlertError):
    """Raised for network, TLS and proxy failures and non-2xx responses."""

    exit_code = ExitCode.FAILURE


class ResponseParseError(TransportError):
    """Raised when a 2xx create response carries no usable sys_id."""


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for the CLI main function that provides unified error handling.

    Catches exceptions and converts them to exit codes with consistent
    error reporting.

    Args:
        show_traceback: If True, show full traceback for unexpected errors
        log_errors: If True, log errors to structlog

    Exit codes:
        - ServiceNowAlertError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except ServiceNowAlertError as e:
                if log_errors:
                    logger.log(
                        e.log_level,
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=int(e.exit_code),
                        **e.details,
                    )
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130  # Standard exit code for SIGINT
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=int(ExitCode.UNKNOWN_ERROR),
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator
