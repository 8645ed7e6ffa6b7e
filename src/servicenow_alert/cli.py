"""
servicenow-alert command.

Usage:
    servicenow-alert [--config PATH] [--store PATH] [--log-level LEVEL] <event args...>

The monitoring platform runs the command once per event, passing the event
template parameters as positional arguments. Options are only recognized
before the first event argument. When the first event argument itself starts
with ``-`` (an application named ``-Shop``), put ``--`` in front of the event
arguments.
"""

from __future__ import annotations

import argparse
from typing import Sequence

import structlog

from servicenow_alert import __version__
from servicenow_alert.config.loader import load_config, resolve_store_path
from servicenow_alert.core.errors import ExitCode, main_with_error_handling
from servicenow_alert.logging import clear_context, configure_logging
from servicenow_alert.orchestrator import AlertProcessor
from servicenow_alert.store.file import FileIdStore

logger = structlog.get_logger()

PROG = "servicenow-alert"


def version_banner() -> str:
    return f"ServiceNowAlert Version [{PROG} {__version__}]"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Create, update or close a ServiceNow incident from an AppDynamics event",
    )
    parser.add_argument("--config", default=None, help="Path to config.yaml (default: ./conf/config.yaml)")
    parser.add_argument("--store", default=None, help="Path to the incident id store file")
    parser.add_argument("--log-level", default="INFO", help="Log level (default: INFO)")
    parser.add_argument("event_args", nargs=argparse.REMAINDER, help="Event template parameters")
    return parser


def event_args(args: argparse.Namespace) -> list[str]:
    """Event arguments with a leading ``--`` separator removed."""
    values = list(args.event_args)
    if values[:1] == ["--"]:
        values = values[1:]
    return values


@main_with_error_handling()
def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(args.log_level.upper())
    clear_context()

    banner = version_banner()
    logger.info("version", banner=banner)
    print(banner)

    values = event_args(args)
    logger.debug("args_received", args=values)

    config = load_config(args.config)
    store = FileIdStore(resolve_store_path(config, args.config, args.store))

    if AlertProcessor(config, store).process(values):
        logger.info("ServiceNow Extension completed successfully.")
        return ExitCode.SUCCESS

    logger.error("ServiceNow Extension completed with errors")
    return ExitCode.FAILURE


if __name__ == "__main__":  # pragma: no cover - exercised via module entrypoint
    raise SystemExit(main())
