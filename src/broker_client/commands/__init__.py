from .base import Command, CommandKind, CommandStep, FinalCommandStep, VariablesStep
from .cancel_instance import CANCEL_INSTANCE, CancelInstanceResult, CancelInstanceStep1, CancelInstanceStep2
from .create_instance import (
    CREATE_INSTANCE,
    CreateInstanceCommandStep1,
    CreateInstanceCommandStep2,
    CreateInstanceCommandStep3,
    CreateInstanceResult,
)
from .create_job import CREATE_JOB, CreateJobCommandStep1, CreateJobCommandStep2, CreateJobCommandStep3, CreateJobResult
from .deploy import (
    DEPLOY_WORKFLOW,
    DeployCommandStep1,
    DeployCommandStep2,
    DeployWorkflowResult,
    ResourceType,
    WorkflowMetadata,
)
from .health_check import HEALTH_CHECK, BrokerInfo, HealthCheckCommand, HealthCheckResult, PartitionInfo
from .publish_message import (
    PUBLISH_MESSAGE,
    PublishMessageCommandStep1,
    PublishMessageCommandStep2,
    PublishMessageCommandStep3,
    PublishMessageResult,
)

ALL_KINDS = (HEALTH_CHECK, DEPLOY_WORKFLOW, CANCEL_INSTANCE, CREATE_INSTANCE, PUBLISH_MESSAGE, CREATE_JOB)

__all__ = [
    "ALL_KINDS",
    "Command",
    "CommandKind",
    "CommandStep",
    "FinalCommandStep",
    "VariablesStep",
    "HEALTH_CHECK",
    "HealthCheckCommand",
    "HealthCheckResult",
    "BrokerInfo",
    "PartitionInfo",
    "DEPLOY_WORKFLOW",
    "DeployCommandStep1",
    "DeployCommandStep2",
    "DeployWorkflowResult",
    "ResourceType",
    "WorkflowMetadata",
    "CANCEL_INSTANCE",
    "CancelInstanceStep1",
    "CancelInstanceStep2",
    "CancelInstanceResult",
    "CREATE_INSTANCE",
    "CreateInstanceCommandStep1",
    "CreateInstanceCommandStep2",
    "CreateInstanceCommandStep3",
    "CreateInstanceResult",
    "PUBLISH_MESSAGE",
    "PublishMessageCommandStep1",
    "PublishMessageCommandStep2",
    "PublishMessageCommandStep3",
    "PublishMessageResult",
    "CREATE_JOB",
    "CreateJobCommandStep1",
    "CreateJobCommandStep2",
    "CreateJobCommandStep3",
    "CreateJobResult",
]
