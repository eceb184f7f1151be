from __future__ import annotations

from dataclasses import dataclass

from ..protocol import CancelWorkflowInstanceRequest, CancelWorkflowInstanceResponse
from .base import CommandKind, CommandStep, FinalCommandStep, require_positive_int


@dataclass(frozen=True)
class CancelInstanceResult:
    workflow_instance_key: int


class CancelInstanceStep1(CommandStep):
    __slots__ = ()

    def workflow_instance_key(self, key: int) -> "CancelInstanceStep2":
        self._request.workflow_instance_key = require_positive_int(key, "workflow_instance_key")
        return self._next(CancelInstanceStep2)


class CancelInstanceStep2(FinalCommandStep[CancelInstanceResult]):
    __slots__ = ()


def _to_result(
    request: CancelWorkflowInstanceRequest, response: CancelWorkflowInstanceResponse
) -> CancelInstanceResult:
    return CancelInstanceResult(workflow_instance_key=request.workflow_instance_key)


CANCEL_INSTANCE = CommandKind(
    name="CancelInstance",
    method="CancelWorkflowInstance",
    request_type=CancelWorkflowInstanceRequest,
    response_type=CancelWorkflowInstanceResponse,
    steps=(CancelInstanceStep1, CancelInstanceStep2),
    to_result=_to_result,
)
