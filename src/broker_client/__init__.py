from .client import BrokerClient
from .commands import (
    BrokerInfo,
    CancelInstanceResult,
    CreateInstanceResult,
    CreateJobResult,
    DeployWorkflowResult,
    HealthCheckResult,
    PartitionInfo,
    PublishMessageResult,
    ResourceType,
    WorkflowMetadata,
)
from .config import ClientConfig
from .errors import (
    BrokerClientError,
    BrokerRejectedError,
    CanceledError,
    ClientClosedError,
    ConnectionUnavailableError,
    DeadlineExceededError,
    TransportError,
    TransportInternalError,
    UsageError,
    ValidationError,
)
from .transport import GrpcTransport, Transport

__all__ = [
    "BrokerClient",
    "ClientConfig",
    "Transport",
    "GrpcTransport",
    "ResourceType",
    "HealthCheckResult",
    "BrokerInfo",
    "PartitionInfo",
    "DeployWorkflowResult",
    "WorkflowMetadata",
    "CancelInstanceResult",
    "CreateInstanceResult",
    "PublishMessageResult",
    "CreateJobResult",
    "BrokerClientError",
    "UsageError",
    "ValidationError",
    "ClientClosedError",
    "TransportError",
    "ConnectionUnavailableError",
    "DeadlineExceededError",
    "CanceledError",
    "TransportInternalError",
    "BrokerRejectedError",
]
