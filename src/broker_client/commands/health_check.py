from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..protocol import HealthRequest, HealthResponse
from .base import CommandKind, FinalCommandStep


@dataclass(frozen=True)
class PartitionInfo:
    partition_id: int
    topic_name: str
    role: str

    @property
    def is_leader(self) -> bool:
        return self.role.upper() == "LEADER"


@dataclass(frozen=True)
class BrokerInfo:
    host: str
    port: int
    partitions: List[PartitionInfo] = field(default_factory=list)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class HealthCheckResult:
    brokers: List[BrokerInfo] = field(default_factory=list)


class HealthCheckCommand(FinalCommandStep[HealthCheckResult]):
    """Ask the gateway for the cluster topology. Nothing to fill in."""

    __slots__ = ()


def _to_result(request: HealthRequest, response: HealthResponse) -> HealthCheckResult:
    return HealthCheckResult(
        brokers=[
            BrokerInfo(
                host=b.host,
                port=b.port,
                partitions=[PartitionInfo(p.partition_id, p.topic_name, p.role) for p in b.partitions],
            )
            for b in response.brokers
        ]
    )


HEALTH_CHECK = CommandKind(
    name="HealthCheck",
    method="Health",
    request_type=HealthRequest,
    response_type=HealthResponse,
    steps=(HealthCheckCommand,),
    to_result=_to_result,
)
