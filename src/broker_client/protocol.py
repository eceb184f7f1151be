"""
Request/response messages exchanged with the broker gateway.

Messages are msgspec structs encoded as MessagePack with camelCase field
names. Requests are mutable because builders fill them in stage by stage.
"""

from __future__ import annotations

from typing import List

import msgspec

from .wire_protocol import LATEST_VERSION


class _Message(msgspec.Struct, rename="camel", kw_only=True, omit_defaults=True):
    pass


class HealthRequest(_Message):
    pass


class Partition(_Message):
    partition_id: int = 0
    topic_name: str = ""
    role: str = ""


class BrokerInfo(_Message):
    host: str = ""
    port: int = 0
    partitions: List[Partition] = msgspec.field(default_factory=list)


class HealthResponse(_Message):
    brokers: List[BrokerInfo] = msgspec.field(default_factory=list)


class WorkflowRequestObject(_Message):
    name: str
    type: str
    definition: bytes


class DeployWorkflowRequest(_Message):
    workflows: List[WorkflowRequestObject] = msgspec.field(default_factory=list)


class WorkflowMetadata(_Message):
    bpmn_process_id: str = ""
    version: int = 0
    workflow_key: int = 0
    resource_name: str = ""


class DeployWorkflowResponse(_Message):
    key: int = 0
    workflows: List[WorkflowMetadata] = msgspec.field(default_factory=list)


class CancelWorkflowInstanceRequest(_Message):
    workflow_instance_key: int = 0


class CancelWorkflowInstanceResponse(_Message):
    pass


class CreateWorkflowInstanceRequest(_Message):
    workflow_key: int = 0
    bpmn_process_id: str = ""
    version: int = LATEST_VERSION
    variables: str = ""
    tenant_id: str = ""


class CreateWorkflowInstanceResponse(_Message):
    workflow_key: int = 0
    bpmn_process_id: str = ""
    version: int = 0
    workflow_instance_key: int = 0


class PublishMessageRequest(_Message):
    name: str = ""
    correlation_key: str = ""
    time_to_live: int = 0
    message_id: str = ""
    variables: str = ""


class PublishMessageResponse(_Message):
    key: int = 0


class CreateJobRequest(_Message):
    job_type: str = ""
    retries: int = 3
    custom_headers: str = ""
    variables: str = ""


class CreateJobResponse(_Message):
    key: int = 0
