from __future__ import annotations

from pathlib import Path

import pytest

from broker_client import BrokerClient, BrokerRejectedError, ResourceType, ValidationError
from broker_client.commands.deploy import DEPLOY_WORKFLOW, resource_type_for
from broker_client.protocol import DeployWorkflowRequest, DeployWorkflowResponse, WorkflowMetadata
from broker_client.testing.mock_transport import MockTransport

BPMN = b'<?xml version="1.0"?><bpmn:definitions><bpmn:process id="order-process"/></bpmn:definitions>'


def test_deploy_resources_and_files(tmp_path: Path) -> None:
    yaml_file = tmp_path / "shipping.yaml"
    yaml_file.write_bytes(b"name: shipping\n")
    transport = MockTransport().on(
        "DeployWorkflow",
        DeployWorkflowResponse(
            key=10,
            workflows=[
                WorkflowMetadata(bpmn_process_id="order-process", version=1, workflow_key=11, resource_name="order.bpmn"),
                WorkflowMetadata(bpmn_process_id="shipping", version=2, workflow_key=12, resource_name="shipping.yaml"),
            ],
        ),
    )
    result = (
        BrokerClient(transport=transport)
        .new_deploy_workflow_command()
        .add_resource(BPMN, "order.bpmn", ResourceType.BPMN)
        .add_resource_file(yaml_file)
        .send()
    )

    assert result.key == 10
    assert [(w.bpmn_process_id, w.version, w.workflow_key) for w in result.workflows] == [
        ("order-process", 1, 11),
        ("shipping", 2, 12),
    ]
    sent = transport.calls[0].request.workflows
    assert [(r.name, r.type) for r in sent] == [("order.bpmn", "BPMN"), ("shipping.yaml", "YAML")]
    assert sent[0].definition == BPMN


def test_resource_type_from_extension() -> None:
    assert resource_type_for("a.bpmn") is ResourceType.BPMN
    assert resource_type_for("A.BPMN") is ResourceType.BPMN
    assert resource_type_for("a.yml") is ResourceType.YAML
    assert resource_type_for("a.yaml") is ResourceType.YAML
    assert resource_type_for("a.xml") is ResourceType.FILE


def test_resource_type_accepts_lowercase_string() -> None:
    transport = MockTransport()
    BrokerClient(transport=transport).new_deploy_workflow_command().add_resource(BPMN, "x", "bpmn").send()
    assert transport.calls[0].request.workflows[0].type == "BPMN"


@pytest.mark.parametrize(
    "build",
    [
        lambda c, tmp: c.new_deploy_workflow_command().add_resource(b"", "empty.bpmn"),
        lambda c, tmp: c.new_deploy_workflow_command().add_resource(BPMN, ""),
        lambda c, tmp: c.new_deploy_workflow_command().add_resource("<xml/>", "str.bpmn"),
        lambda c, tmp: c.new_deploy_workflow_command().add_resource(BPMN, "x.bpmn", "DMN"),
        lambda c, tmp: c.new_deploy_workflow_command().add_resource_file(tmp / "missing.bpmn"),
        lambda c, tmp: c.new_deploy_workflow_command().add_resource(BPMN, "a.bpmn").add_resource(b"", "b.bpmn"),
    ],
)
def test_invalid_resources_fail_before_any_send(build, tmp_path: Path) -> None:
    transport = MockTransport()
    with pytest.raises(ValidationError):
        build(BrokerClient(transport=transport), tmp_path)
    assert transport.calls == []


def test_terminal_validation_requires_a_resource() -> None:
    with pytest.raises(ValidationError):
        DEPLOY_WORKFLOW.validate(DeployWorkflowRequest())


def test_duplicate_names_are_left_to_the_broker() -> None:
    transport = MockTransport().on("DeployWorkflow", BrokerRejectedError("invalid_argument", "duplicate resource name"))
    cmd = (
        BrokerClient(transport=transport)
        .new_deploy_workflow_command()
        .add_resource(BPMN, "order.bpmn")
        .add_resource(BPMN, "order.bpmn")
    )
    with pytest.raises(BrokerRejectedError):
        cmd.send()
    assert len(transport.calls[0].request.workflows) == 2
