from __future__ import annotations

from dataclasses import dataclass

import msgspec
import pytest

from broker_client import BrokerClient, BrokerRejectedError, ValidationError
from broker_client.protocol import CreateWorkflowInstanceResponse
from broker_client.testing.mock_transport import MockTransport
from broker_client.wire_protocol import LATEST_VERSION


def _client(transport: MockTransport) -> BrokerClient:
    return BrokerClient(transport=transport)


def test_create_instance_by_process_id_and_version() -> None:
    transport = MockTransport().on(
        "CreateWorkflowInstance", CreateWorkflowInstanceResponse(workflow_instance_key=1001)
    )
    result = (
        _client(transport)
        .new_create_instance_command()
        .bpmn_process_id("order-process")
        .version(3)
        .variables_from_map({"orderId": 42})
        .send()
    )

    assert result.workflow_instance_key == 1001
    assert result.bpmn_process_id == "order-process"
    assert result.version == 3

    (call,) = transport.calls
    assert call.method == "CreateWorkflowInstance"
    assert call.request.bpmn_process_id == "order-process"
    assert call.request.version == 3
    assert msgspec.json.decode(call.request.variables) == {"orderId": 42}


def test_create_instance_by_workflow_key_uses_broker_metadata() -> None:
    transport = MockTransport().on(
        "CreateWorkflowInstance",
        CreateWorkflowInstanceResponse(
            workflow_key=77, bpmn_process_id="order-process", version=5, workflow_instance_key=9
        ),
    )
    result = _client(transport).new_create_instance_command().workflow_key(77).send()
    assert (result.workflow_key, result.bpmn_process_id, result.version) == (77, "order-process", 5)
    assert transport.calls[0].request.bpmn_process_id == ""


def test_latest_version_is_sent_as_sentinel() -> None:
    transport = MockTransport()
    _client(transport).new_create_instance_command().bpmn_process_id("p").latest_version().send()
    assert transport.calls[0].request.version == LATEST_VERSION


def test_variables_and_tenant_last_write_wins() -> None:
    transport = MockTransport()
    (
        _client(transport)
        .new_create_instance_command()
        .workflow_key(1)
        .variables_from_map({"a": 1})
        .tenant_id("first")
        .variables_from_string('{"b": 2}')
        .tenant_id("second")
        .send()
    )
    req = transport.calls[0].request
    assert msgspec.json.decode(req.variables) == {"b": 2}
    assert req.tenant_id == "second"


@dataclass
class _Order:
    orderId: int
    items: list


def test_variables_from_object() -> None:
    transport = MockTransport()
    _client(transport).new_create_instance_command().workflow_key(1).variables_from_object(
        _Order(orderId=1, items=["x"])
    ).send()
    assert msgspec.json.decode(transport.calls[0].request.variables) == {"orderId": 1, "items": ["x"]}


@pytest.mark.parametrize(
    "build",
    [
        lambda c: c.new_create_instance_command().bpmn_process_id(""),
        lambda c: c.new_create_instance_command().bpmn_process_id("   "),
        lambda c: c.new_create_instance_command().bpmn_process_id("p").version(0),
        lambda c: c.new_create_instance_command().bpmn_process_id("p").version(-3),
        lambda c: c.new_create_instance_command().workflow_key(0),
        lambda c: c.new_create_instance_command().workflow_key("12"),
        lambda c: c.new_create_instance_command().workflow_key(1).variables_from_string("[1, 2]"),
        lambda c: c.new_create_instance_command().workflow_key(1).variables_from_string("{not json"),
        lambda c: c.new_create_instance_command().workflow_key(1).variables_from_object(object()),
        lambda c: c.new_create_instance_command().workflow_key(1).tenant_id(""),
    ],
)
def test_invalid_values_fail_before_any_send(build) -> None:
    transport = MockTransport()
    with pytest.raises(ValidationError):
        build(_client(transport))
    assert transport.calls == []


def test_broker_rejection_is_not_a_transport_error() -> None:
    transport = MockTransport().on("CreateWorkflowInstance", BrokerRejectedError("not_found", "workflow not found"))
    cmd = _client(transport).new_create_instance_command().bpmn_process_id("missing").latest_version()
    with pytest.raises(BrokerRejectedError) as exc:
        cmd.send()
    assert exc.value.reason == "not_found"
    assert exc.value.command == "CreateInstance"
    assert "CreateInstance" in str(exc.value)


@pytest.mark.parametrize(
    "build",
    [
        lambda c: c.new_create_instance_command().workflow_key(7),
        lambda c: c.new_create_instance_command().bpmn_process_id("order-process").latest_version(),
    ],
)
def test_result_never_reports_the_latest_version_marker(build) -> None:
    transport = MockTransport().on(
        "CreateWorkflowInstance", CreateWorkflowInstanceResponse(workflow_key=7, workflow_instance_key=12)
    )
    result = build(_client(transport)).send()
    assert result.version == 0
    assert result.workflow_instance_key == 12


def test_explicit_version_is_kept_when_the_broker_omits_it() -> None:
    transport = MockTransport().on("CreateWorkflowInstance", CreateWorkflowInstanceResponse(workflow_instance_key=3))
    result = _client(transport).new_create_instance_command().bpmn_process_id("order-process").version(4).send()
    assert (result.bpmn_process_id, result.version) == ("order-process", 4)


def test_padded_process_id_is_sent_as_given() -> None:
    transport = MockTransport()
    _client(transport).new_create_instance_command().bpmn_process_id(" order-process").latest_version().send()
    assert transport.calls[0].request.bpmn_process_id == " order-process"
