from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Union

from ..errors import ValidationError
from ..protocol import PublishMessageRequest, PublishMessageResponse
from .base import CommandKind, CommandStep, FinalCommandStep, VariablesStep, require_text


@dataclass(frozen=True)
class PublishMessageResult:
    key: int


def _ttl_millis(ttl: Union[int, datetime.timedelta]) -> int:
    if isinstance(ttl, datetime.timedelta):
        ms = int(ttl.total_seconds() * 1000)
    elif isinstance(ttl, int) and not isinstance(ttl, bool):
        ms = ttl
    else:
        raise ValidationError("time_to_live", f"expected milliseconds or timedelta, got {type(ttl).__name__}")
    if ms < 0:
        raise ValidationError("time_to_live", f"must be >= 0, got {ms}ms")
    return ms


class PublishMessageCommandStep1(CommandStep):
    __slots__ = ()

    def message_name(self, name: str) -> "PublishMessageCommandStep2":
        self._request.name = require_text(name, "message_name")
        return self._next(PublishMessageCommandStep2)


class PublishMessageCommandStep2(CommandStep):
    __slots__ = ()

    def correlation_key(self, key: str) -> "PublishMessageCommandStep3":
        self._request.correlation_key = require_text(key, "correlation_key")
        return self._next(PublishMessageCommandStep3)


class PublishMessageCommandStep3(
    VariablesStep["PublishMessageCommandStep3"], FinalCommandStep[PublishMessageResult]
):
    __slots__ = ()

    def time_to_live(self, ttl: Union[int, datetime.timedelta]) -> "PublishMessageCommandStep3":
        """How long the broker buffers the message; ints are milliseconds."""
        self._request.time_to_live = _ttl_millis(ttl)
        return self

    def message_id(self, message_id: str) -> "PublishMessageCommandStep3":
        self._request.message_id = require_text(message_id, "message_id")
        return self


def _to_result(request: PublishMessageRequest, response: PublishMessageResponse) -> PublishMessageResult:
    return PublishMessageResult(key=response.key)


PUBLISH_MESSAGE = CommandKind(
    name="PublishMessage",
    method="PublishMessage",
    request_type=PublishMessageRequest,
    response_type=PublishMessageResponse,
    steps=(PublishMessageCommandStep1, PublishMessageCommandStep2, PublishMessageCommandStep3),
    to_result=_to_result,
)
