from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from ..errors import ValidationError
from ..protocol import DeployWorkflowRequest, DeployWorkflowResponse, WorkflowRequestObject
from .base import CommandKind, CommandStep, FinalCommandStep, require_text


class ResourceType(str, enum.Enum):
    # FILE lets the broker decide from the resource name.
    FILE = "FILE"
    BPMN = "BPMN"
    YAML = "YAML"


_EXTENSION_TYPES = {
    ".bpmn": ResourceType.BPMN,
    ".bpmn20.xml": ResourceType.BPMN,
    ".yaml": ResourceType.YAML,
    ".yml": ResourceType.YAML,
}


def resource_type_for(name: str) -> ResourceType:
    lowered = name.lower()
    for ext, rtype in _EXTENSION_TYPES.items():
        if lowered.endswith(ext):
            return rtype
    return ResourceType.FILE


@dataclass(frozen=True)
class WorkflowMetadata:
    bpmn_process_id: str
    version: int
    workflow_key: int
    resource_name: str


@dataclass(frozen=True)
class DeployWorkflowResult:
    key: int
    workflows: List[WorkflowMetadata] = field(default_factory=list)


class _ResourceStep(CommandStep):
    __slots__ = ()

    def _add(self, definition: bytes, name: str, resource_type: Union[ResourceType, str]) -> None:
        name = require_text(name, "resource name")
        if not isinstance(definition, (bytes, bytearray, memoryview)):
            raise ValidationError(name, f"definition must be bytes, got {type(definition).__name__}")
        if len(definition) == 0:
            raise ValidationError(name, "definition cannot be empty")
        if isinstance(resource_type, str) and not isinstance(resource_type, ResourceType):
            resource_type = resource_type.upper()
        try:
            rtype = ResourceType(resource_type)
        except ValueError:
            raise ValidationError(name, f"unknown resource type {resource_type!r}") from None
        self._request.workflows.append(
            WorkflowRequestObject(name=name, type=rtype.value, definition=bytes(definition))
        )

    def _add_file(self, path: Union[str, Path]) -> None:
        p = Path(path).expanduser()
        try:
            definition = p.read_bytes()
        except OSError as e:
            raise ValidationError(str(path), f"cannot read resource file: {e}") from e
        self._add(definition, p.name, resource_type_for(p.name))


class DeployCommandStep1(_ResourceStep):
    """Deploy needs at least one resource before it can be sent."""

    __slots__ = ()

    def add_resource(
        self, definition: bytes, name: str, resource_type: Union[ResourceType, str] = ResourceType.FILE
    ) -> "DeployCommandStep2":
        self._add(definition, name, resource_type)
        return self._next(DeployCommandStep2)

    def add_resource_file(self, path: Union[str, Path]) -> "DeployCommandStep2":
        self._add_file(path)
        return self._next(DeployCommandStep2)


class DeployCommandStep2(_ResourceStep, FinalCommandStep[DeployWorkflowResult]):
    __slots__ = ()

    def add_resource(
        self, definition: bytes, name: str, resource_type: Union[ResourceType, str] = ResourceType.FILE
    ) -> "DeployCommandStep2":
        self._add(definition, name, resource_type)
        return self

    def add_resource_file(self, path: Union[str, Path]) -> "DeployCommandStep2":
        self._add_file(path)
        return self


def _validate(request: DeployWorkflowRequest) -> None:
    if not request.workflows:
        raise ValidationError("resources", "at least one resource is required")


def _to_result(request: DeployWorkflowRequest, response: DeployWorkflowResponse) -> DeployWorkflowResult:
    return DeployWorkflowResult(
        key=response.key,
        workflows=[
            WorkflowMetadata(
                bpmn_process_id=w.bpmn_process_id,
                version=w.version,
                workflow_key=w.workflow_key,
                resource_name=w.resource_name,
            )
            for w in response.workflows
        ],
    )


DEPLOY_WORKFLOW = CommandKind(
    name="DeployWorkflow",
    method="DeployWorkflow",
    request_type=DeployWorkflowRequest,
    response_type=DeployWorkflowResponse,
    steps=(DeployCommandStep1, DeployCommandStep2),
    to_result=_to_result,
    validate=_validate,
)
