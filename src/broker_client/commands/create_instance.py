from __future__ import annotations

from dataclasses import dataclass

from ..errors import ValidationError
from ..protocol import CreateWorkflowInstanceRequest, CreateWorkflowInstanceResponse
from ..wire_protocol import LATEST_VERSION
from .base import CommandKind, CommandStep, FinalCommandStep, VariablesStep, require_positive_int, require_text


@dataclass(frozen=True)
class CreateInstanceResult:
    workflow_key: int
    bpmn_process_id: str
    version: int
    workflow_instance_key: int


class CreateInstanceCommandStep1(CommandStep):
    """Pick the workflow either by deployed key or by BPMN process id."""

    __slots__ = ()

    def bpmn_process_id(self, process_id: str) -> "CreateInstanceCommandStep2":
        self._request.bpmn_process_id = require_text(process_id, "bpmn_process_id")
        return self._next(CreateInstanceCommandStep2)

    def workflow_key(self, key: int) -> "CreateInstanceCommandStep3":
        self._request.workflow_key = require_positive_int(key, "workflow_key")
        return self._next(CreateInstanceCommandStep3)


class CreateInstanceCommandStep2(CommandStep):
    __slots__ = ()

    def version(self, version: int) -> "CreateInstanceCommandStep3":
        self._request.version = require_positive_int(version, "version")
        return self._next(CreateInstanceCommandStep3)

    def latest_version(self) -> "CreateInstanceCommandStep3":
        self._request.version = LATEST_VERSION
        return self._next(CreateInstanceCommandStep3)


class CreateInstanceCommandStep3(
    VariablesStep["CreateInstanceCommandStep3"], FinalCommandStep[CreateInstanceResult]
):
    __slots__ = ()

    def tenant_id(self, tenant_id: str) -> "CreateInstanceCommandStep3":
        self._request.tenant_id = require_text(tenant_id, "tenant_id")
        return self


def _validate(request: CreateWorkflowInstanceRequest) -> None:
    if not request.workflow_key and not request.bpmn_process_id:
        raise ValidationError("workflow", "either workflow_key or bpmn_process_id is required")


def _to_result(
    request: CreateWorkflowInstanceRequest, response: CreateWorkflowInstanceResponse
) -> CreateInstanceResult:
    # The broker resolves the concrete version; fall back to what was asked for.
    # LATEST_VERSION is a request-only marker and never shows up in a result.
    version = response.version
    if version <= 0:
        version = request.version if request.version != LATEST_VERSION else 0
    return CreateInstanceResult(
        workflow_key=response.workflow_key or request.workflow_key,
        bpmn_process_id=response.bpmn_process_id or request.bpmn_process_id,
        version=version,
        workflow_instance_key=response.workflow_instance_key,
    )


CREATE_INSTANCE = CommandKind(
    name="CreateInstance",
    method="CreateWorkflowInstance",
    request_type=CreateWorkflowInstanceRequest,
    response_type=CreateWorkflowInstanceResponse,
    steps=(CreateInstanceCommandStep1, CreateInstanceCommandStep2, CreateInstanceCommandStep3),
    to_result=_to_result,
    validate=_validate,
)
