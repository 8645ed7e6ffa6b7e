"""Root test configuration."""

import logging

import pytest
import respx
import structlog


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


DEEP_LINK_URL = "http://controller:8090/controller/#location=APP_INCIDENT_DETAIL&incident="


def condition_args(
    *,
    scope_type="APPLICATION_COMPONENT",
    scope_name="Web Tier",
    scope_id="12",
    condition_name="CPU Busy",
    condition_id="41",
    operator=">",
    unit_type="ABSOLUTE",
    use_default_baseline=None,
    baseline_name="Daily Trend",
    baseline_id="7",
    threshold="90",
    observed="97",
):
    """Positional slots for one triggered condition."""
    args = [scope_type, scope_name, scope_id, condition_name, condition_id, operator, unit_type]
    if unit_type.upper().startswith("BASELINE"):
        args.append("true" if use_default_baseline else "false")
        if not use_default_baseline:
            args.extend([baseline_name, baseline_id])
    args.extend([threshold, observed])
    return args


def entity_args(*conditions, entity_type="APPLICATION_COMPONENT_NODE", name="node-1", entity_id="301"):
    """Positional slots for one evaluation entity and its conditions."""
    args = [entity_type, name, entity_id, str(len(conditions))]
    for condition in conditions:
        args.extend(condition)
    return args


def violation_args(
    *entities,
    app_name="ECommerce",
    app_id="5",
    alert_time="Mon Oct 19 10:15:00 UTC 2026",
    priority="1",
    severity="ERROR",
    tag="",
    health_rule_name="CPU High",
    health_rule_id="17",
    period="5",
    affected_entity_type="APPLICATION_COMPONENT_NODE",
    affected_entity_name="host-7",
    affected_entity_id="301",
    summary="CPU is high on host-7",
    incident_id="INC-1",
    deep_link_url=DEEP_LINK_URL,
    event_type="POLICY_OPEN_WARNING",
    account_name="customer1",
    account_id="2",
):
    """A complete health rule violation argument vector."""
    args = [
        app_name,
        app_id,
        alert_time,
        priority,
        severity,
        tag,
        health_rule_name,
        health_rule_id,
        period,
        affected_entity_type,
        affected_entity_name,
        affected_entity_id,
        str(len(entities)),
    ]
    for entity in entities:
        args.extend(entity)
    args.extend([summary, incident_id, deep_link_url, event_type, account_name, account_id])
    return args


def other_event_args(event_types=(("APPLICATION_ERROR", "3"),), summaries=()):
    """A complete non-policy event argument vector."""
    args = [
        "ECommerce",
        "5",
        "Mon Oct 19 10:15:00 UTC 2026",
        "2",
        "WARN",
        "",
        "Error notification",
        "88",
        "1",
        str(len(event_types)),
    ]
    for event_type, count in event_types:
        args.extend([event_type, count])
    args.append(str(len(summaries)))
    for summary in summaries:
        args.extend(summary)
    args.extend(["http://controller:8090/controller/#location=APP_EVENT", "customer1", "2"])
    return args


@pytest.fixture
def config_data():
    """Raw config mapping as it would come out of config.yaml."""
    return {
        "serviceNow": {
            "host": "dev12345.service-now.com",
            "protocol": "https",
            "username": "admin",
            "password": "secret",
        },
        "fields": [
            {"name": "assignment_group", "value": "Service Desk"},
            {"name": "category", "value": ""},
        ],
    }


@pytest.fixture
def config(config_data):
    from servicenow_alert.config.settings import Configuration

    return Configuration.from_dict(config_data)


@pytest.fixture(autouse=True)
def no_global_http_routes():
    """Routes added to the module-level respx router must not outlive their test."""
    yield
    leaked = list(respx.mock.routes)
    respx.mock.clear()
    assert not leaked, f"routes left on the global respx router: {leaked}"
