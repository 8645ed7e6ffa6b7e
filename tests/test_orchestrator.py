"""Tests for orchestrator.py.

Covers the create/update/close decision table and the event flow through
AlertProcessor with a memory-backed store.
"""

import json
from unittest.mock import MagicMock

import pytest
import respx
from conftest import condition_args, entity_args, other_event_args, violation_args
from httpx import Response
from servicenow_alert.core.errors import DecodeError, UnsupportedEventError
from servicenow_alert.orchestrator import (
    Action,
    AlertProcessor,
    decide_action,
    should_resolve_event,
)
from servicenow_alert.store.file import FileIdStore
from servicenow_alert.store.memory import MemoryIdStore

INCIDENT_URL = "https://dev12345.service-now.com/api/now/table/incident"


@pytest.mark.parametrize(
    "event_type,expected",
    [
        ("POLICY_CLOSE", True),
        ("POLICY_CLOSE_WARNING", True),
        ("POLICY_CLOSE_CRITICAL", True),
        ("POLICY_CANCELED", True),
        ("POLICY_CANCELED_WARNING", True),
        ("POLICY_OPEN_WARNING", False),
        ("POLICY_OPEN_CRITICAL", False),
        ("POLICY_UPGRADED", False),
        ("POLICY_CONTINUES_CRITICAL", False),
        ("policy_close", False),
        ("", False),
        (None, False),
    ],
)
def test_should_resolve_event(event_type, expected):
    assert should_resolve_event(event_type) is expected


class TestDecideAction:
    """The decision table is total over (store hit, event type)."""

    @pytest.mark.parametrize("event_type", ["POLICY_OPEN_WARNING", "POLICY_CLOSE", "POLICY_CANCELED", None])
    def test_miss_always_creates(self, event_type):
        assert decide_action(None, event_type) is Action.CREATE

    def test_empty_sys_id_is_a_miss(self):
        assert decide_action("", "POLICY_CLOSE") is Action.CREATE

    def test_hit_open_updates(self):
        assert decide_action("abc123", "POLICY_OPEN_CRITICAL") is Action.UPDATE

    def test_hit_close_closes(self):
        assert decide_action("abc123", "POLICY_CLOSE_WARNING") is Action.CLOSE

    def test_hit_cancel_closes(self):
        assert decide_action("abc123", "POLICY_CANCELED_CRITICAL") is Action.CLOSE

    def test_hit_without_event_type_updates(self):
        assert decide_action("abc123", None) is Action.UPDATE


class TestAlertProcessorDispatch:
    """Dispatch to the handler, with the handler mocked."""

    def test_miss_posts(self, config):
        handler = MagicMock()
        handler.post_alert.return_value = True
        processor = AlertProcessor(config, MemoryIdStore(), handler=handler)

        assert processor.process(violation_args(incident_id="INC-1")) is True

        alert, incident_id = handler.post_alert.call_args.args
        assert incident_id == "INC-1"
        assert alert.short_description == "Policy CPU High for host-7 violated"
        assert alert.dynamic_properties == {"assignment_group": "Service Desk"}
        handler.update_alert.assert_not_called()

    def test_hit_updates(self, config):
        handler = MagicMock()
        handler.update_alert.return_value = True
        processor = AlertProcessor(config, MemoryIdStore({"INC-1": "abc123"}), handler=handler)

        assert processor.process(violation_args(event_type="POLICY_OPEN_CRITICAL")) is True

        _, incident_id, sys_id = handler.update_alert.call_args.args
        assert (incident_id, sys_id) == ("INC-1", "abc123")
        assert handler.update_alert.call_args.kwargs == {"close": False}
        handler.post_alert.assert_not_called()

    def test_hit_close(self, config):
        handler = MagicMock()
        handler.update_alert.return_value = True
        processor = AlertProcessor(config, MemoryIdStore({"INC-1": "abc123"}), handler=handler)

        processor.process(violation_args(event_type="POLICY_CLOSE"))

        assert handler.update_alert.call_args.kwargs == {"close": True}

    def test_close_without_binding_posts(self, config):
        handler = MagicMock()
        handler.post_alert.return_value = True
        processor = AlertProcessor(config, MemoryIdStore(), handler=handler)

        assert processor.process(violation_args(event_type="POLICY_CLOSE")) is True

        handler.post_alert.assert_called_once()
        handler.update_alert.assert_not_called()

    def test_handler_failure_propagates_as_false(self, config):
        handler = MagicMock()
        handler.post_alert.return_value = False
        processor = AlertProcessor(config, MemoryIdStore(), handler=handler)

        assert processor.process(violation_args()) is False

    def test_other_event_is_unsupported(self, config):
        handler = MagicMock()
        processor = AlertProcessor(config, MemoryIdStore(), handler=handler)

        with pytest.raises(UnsupportedEventError):
            processor.process(other_event_args())

        handler.post_alert.assert_not_called()
        handler.update_alert.assert_not_called()

    def test_decode_failure(self, config):
        processor = AlertProcessor(config, MemoryIdStore(), handler=MagicMock())

        with pytest.raises(DecodeError):
            processor.process(["not", "an", "event"])


class TestScenarios:
    """End-to-end flows against a mocked ServiceNow."""

    @respx.mock
    def test_s1_create(self, config):
        store = MemoryIdStore()
        route = respx.post(INCIDENT_URL).mock(
            return_value=Response(201, json={"result": {"sys_id": "abc123"}})
        )

        ok = AlertProcessor(config, store).process(
            violation_args(
                incident_id="INC-1",
                severity="ERROR",
                health_rule_name="CPU High",
                affected_entity_name="host-7",
                event_type="POLICY_OPEN_WARNING",
            )
        )

        assert ok is True
        assert route.call_count == 1
        body = json.loads(route.calls.last.request.content)
        assert body["impact"] == "1"
        assert body["short_description"] == "Policy CPU High for host-7 violated"
        assert body["comments"].split("\n") == [
            "Application Name:ECommerce",
            "Policy Violation Alert Time:Mon Oct 19 10:15:00 UTC 2026",
            "Severity:ERROR",
            "Name of Violated Policy:CPU High",
            "Affected Entity Type:APPLICATION_COMPONENT_NODE",
            "Name of Affected Entity:host-7",
        ]
        assert store.items() == {"INC-1": "abc123"}

    def test_s2_update_open(self, config):
        store = MemoryIdStore({"INC-1": "abc123"})
        with respx.mock(assert_all_called=False) as mock:
            post = mock.post(INCIDENT_URL)
            route = mock.put(f"{INCIDENT_URL}/abc123").mock(return_value=Response(200, json={}))

            ok = AlertProcessor(config, store).process(violation_args(event_type="POLICY_OPEN_CRITICAL"))

            assert ok is True
            assert route.call_count == 1
            assert not post.called
            body = json.loads(route.calls.last.request.content)
            assert not {"state", "close_code", "close_notes"} & set(body)
        assert store.items() == {"INC-1": "abc123"}

    @respx.mock
    def test_s3_close(self, config):
        store = MemoryIdStore({"INC-1": "abc123"})
        route = respx.put(f"{INCIDENT_URL}/abc123").mock(return_value=Response(200, json={}))

        assert AlertProcessor(config, store).process(violation_args(event_type="POLICY_CLOSE")) is True

        body = json.loads(route.calls.last.request.content)
        assert body["state"] == "6"
        assert "close_code" in body
        assert "close_notes" in body
        assert store.get("INC-1") == "abc123"

    @respx.mock
    def test_s4_cancel(self, config):
        store = MemoryIdStore({"INC-1": "abc123"})
        route = respx.put(f"{INCIDENT_URL}/abc123").mock(return_value=Response(200, json={}))

        ok = AlertProcessor(config, store).process(violation_args(event_type="POLICY_CANCELED_WARNING"))

        assert ok is True
        body = json.loads(route.calls.last.request.content)
        assert body["state"] == "6"

    def test_s5_non_violation_makes_no_call(self, config):
        with respx.mock(assert_all_called=False) as mock:
            route = mock.route()

            with pytest.raises(UnsupportedEventError):
                AlertProcessor(config, MemoryIdStore()).process(other_event_args())
            assert not route.called

    @respx.mock
    def test_s6_transport_failure_then_retry_creates(self, config):
        store = MemoryIdStore()
        route = respx.post(INCIDENT_URL)
        route.side_effect = [
            Response(500),
            Response(201, json={"result": {"sys_id": "abc123"}}),
        ]
        processor = AlertProcessor(config, store)

        assert processor.process(violation_args()) is False
        assert store.get("INC-1") is None

        assert processor.process(violation_args()) is True
        assert route.call_count == 2
        assert store.get("INC-1") == "abc123"

    @respx.mock
    def test_torn_store_record_creates_incident(self, config, tmp_path):
        store_path = tmp_path / "servicenow-incidents.tsv"
        store_path.write_bytes(b"INC-1\tabc123\nINC-2\tde")
        route = respx.post(INCIDENT_URL).mock(
            return_value=Response(201, json={"result": {"sys_id": "def456"}})
        )
        store = FileIdStore(store_path)

        assert AlertProcessor(config, store).process(violation_args(incident_id="INC-2")) is True

        assert route.call_count == 1
        assert store.get("INC-2") == "def456"
        assert store_path.read_bytes() == b"INC-1\tabc123\nINC-2\tdef456\n"

    @respx.mock
    def test_comments_with_conditions(self, config):
        route = respx.post(INCIDENT_URL).mock(
            return_value=Response(201, json={"result": {"sys_id": "abc123"}})
        )

        AlertProcessor(config, MemoryIdStore()).process(
            violation_args(entity_args(condition_args(), condition_args(condition_name="Memory")))
        )

        comments = json.loads(route.calls.last.request.content)["comments"]
        assert comments.count("Incident URL:") == 2
