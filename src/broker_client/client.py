from __future__ import annotations

import logging
import threading
import time
from typing import Any, Optional

import msgspec

from .commands import (
    CANCEL_INSTANCE,
    CREATE_INSTANCE,
    CREATE_JOB,
    DEPLOY_WORKFLOW,
    HEALTH_CHECK,
    PUBLISH_MESSAGE,
    CancelInstanceStep1,
    CommandKind,
    CreateInstanceCommandStep1,
    CreateJobCommandStep1,
    DeployCommandStep1,
    HealthCheckCommand,
    PublishMessageCommandStep1,
)
from .config import ClientConfig
from .errors import ClientClosedError
from .transport import GrpcTransport, Transport

logger = logging.getLogger(__name__)


class BrokerClient:
    """Entry point for issuing commands to a workflow broker.

    Each `new_*_command` call returns the first stage of a fresh builder. The
    client owns its transport and releases it in `close()`; a transport passed
    in is owned too.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[Transport] = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._transport: Transport = transport or GrpcTransport.from_config(self.config)
        self._closed = False
        self._in_flight = 0
        self._cond = threading.Condition()
        logger.info(f"Created broker client for {self.config.gateway_address}")

    @property
    def closed(self) -> bool:
        return self._closed

    def _start(self, kind: CommandKind) -> Any:
        if self._closed:
            raise ClientClosedError(f"cannot create {kind.name} command: client is closed")
        logger.debug(f"New {kind.name} command")
        return kind.start(self)

    def new_health_check_command(self) -> HealthCheckCommand:
        return self._start(HEALTH_CHECK)

    def new_deploy_workflow_command(self) -> DeployCommandStep1:
        return self._start(DEPLOY_WORKFLOW)

    def new_cancel_instance_command(self) -> CancelInstanceStep1:
        return self._start(CANCEL_INSTANCE)

    def new_create_instance_command(self) -> CreateInstanceCommandStep1:
        return self._start(CREATE_INSTANCE)

    def new_publish_message_command(self) -> PublishMessageCommandStep1:
        return self._start(PUBLISH_MESSAGE)

    def new_create_job_command(self) -> CreateJobCommandStep1:
        return self._start(CREATE_JOB)

    def _invoke(self, kind: CommandKind, request: msgspec.Struct, timeout: Optional[float]) -> Any:
        """Run one transport round trip, tracked so close() can drain it."""
        with self._cond:
            if self._closed:
                raise ClientClosedError(f"cannot send {kind.name} command: client is closed")
            self._in_flight += 1
        if timeout is None:
            timeout = self.config.request_timeout_s
        try:
            logger.debug(f"Sending {kind.name} command (timeout={timeout})")
            return self._transport.invoke(kind.method, request, kind.response_type, timeout)
        finally:
            with self._cond:
                self._in_flight -= 1
                if self._in_flight == 0:
                    self._cond.notify_all()

    def close(self) -> None:
        """Stop accepting commands, let in-flight sends finish, release the transport.

        Waits at most `config.close_timeout_s` for in-flight sends; those still
        running afterwards fail with a transport error once the channel closes.
        Calling close() again is a no-op.
        """
        with self._cond:
            if self._closed:
                return
            self._closed = True
            deadline = None
            if self.config.close_timeout_s is not None:
                deadline = time.monotonic() + self.config.close_timeout_s
            while self._in_flight > 0:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    logger.warning(f"Closing broker client with {self._in_flight} command(s) still in flight.")
                    break
                self._cond.wait(remaining)

        self._transport.close()
        logger.info(f"Broker client for {self.config.gateway_address} closed.")

    def __enter__(self) -> "BrokerClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
