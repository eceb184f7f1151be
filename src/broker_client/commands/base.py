"""
Staged command builders.

A builder is a chain of stage objects sharing one Command. Each stage class
only defines the methods that are legal at that point, so a stage that can
`send` is only reachable once every required field has been supplied. Stages
are cheap views; all state lives on the Command.

Per command kind the moving parts are collected in a CommandKind: the RPC
method, the request/response messages, the ordered stage classes, the
terminal validation and the result mapping. The client builds every kind the
same way through `CommandKind.start`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import IO, TYPE_CHECKING, Any, Callable, ClassVar, Generic, Mapping, Optional, Tuple, Type, TypeVar, Union

import msgspec

from ..errors import BrokerRejectedError, TransportError, UsageError, ValidationError
from ..variables import (
    encode_variables_document,
    encode_variables_map,
    encode_variables_object,
    encode_variables_reader,
)

if TYPE_CHECKING:
    from ..client import BrokerClient

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")
StepT = TypeVar("StepT", bound="CommandStep")
NextT = TypeVar("NextT")


@dataclass(frozen=True)
class CommandKind(Generic[ResultT]):
    name: str
    method: str
    request_type: Type[msgspec.Struct]
    response_type: Type[msgspec.Struct]
    # Ordered stages, first one is handed out by the client factory.
    steps: Tuple[Type["CommandStep"], ...]
    to_result: Callable[[Any, Any], ResultT]
    validate: Optional[Callable[[Any], None]] = None

    def start(self, client: "BrokerClient") -> "CommandStep":
        return self.steps[0](Command(client, self))


class Command(Generic[ResultT]):
    """The in-progress request of one builder. Sent at most once."""

    def __init__(self, client: "BrokerClient", kind: CommandKind[ResultT]) -> None:
        self.client = client
        self.kind = kind
        self.request = kind.request_type()
        self._sent = False

    @property
    def sent(self) -> bool:
        return self._sent

    def send(self, timeout: Optional[float] = None) -> ResultT:
        if self._sent:
            raise UsageError(f"{self.kind.name}: command was already sent")
        if self.kind.validate is not None:
            self.kind.validate(self.request)
        self._sent = True

        try:
            response = self.client._invoke(self.kind, self.request, timeout)
        except (TransportError, BrokerRejectedError) as e:
            e.command = self.kind.name
            logger.warning(f"{self.kind.name} command failed: {e}")
            raise
        return self.kind.to_result(self.request, response)


class CommandStep:
    """A stage of a builder. Non-terminal stages cannot send."""

    __slots__ = ("_command",)

    def __init__(self, command: Command) -> None:
        self._command = command

    @property
    def _request(self) -> Any:
        return self._command.request

    def _next(self, step_cls: Type[StepT]) -> StepT:
        return step_cls(self._command)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self._command.kind.name}>"


class FinalCommandStep(CommandStep, Generic[ResultT]):
    """Stage reached once all required fields are set."""

    __slots__ = ()

    def send(self, timeout: Optional[float] = None) -> ResultT:
        """
        Validate, send the command and wait for the broker's answer.

        Args:
            timeout: Deadline in seconds for this call, passed to the transport
                as given. None uses the client's configured request timeout.

        Raises:
            UsageError: the command is incomplete, was already sent or the
                client is closed. Nothing is sent in that case.
            TransportError: the broker could not be reached in time.
            BrokerRejectedError: the broker refused the command.
        """
        return self._command.send(timeout)


class VariablesStep(CommandStep, Generic[NextT]):
    """
    Variables setters. On terminal stages they return the same stage; where
    variables are a required field `_after_variables` names the next stage.
    """

    __slots__ = ()

    _after_variables: ClassVar[Optional[Type[CommandStep]]] = None

    def _set_variables(self, encoded: str) -> NextT:
        self._request.variables = encoded
        if self._after_variables is None:
            return self  # type: ignore[return-value]
        return self._next(self._after_variables)  # type: ignore[return-value]

    def variables_from_string(self, document: Union[str, bytes]) -> NextT:
        """Set variables from a JSON object document."""
        return self._set_variables(encode_variables_document(document))

    def variables_from_map(self, variables: Mapping[str, Any]) -> NextT:
        return self._set_variables(encode_variables_map(variables))

    def variables_from_object(self, obj: Any) -> NextT:
        """Set variables from a msgspec.Struct, dataclass or similar object."""
        return self._set_variables(encode_variables_object(obj))

    def variables_from_reader(self, reader: IO[Any]) -> NextT:
        return self._set_variables(encode_variables_reader(reader))


def require_text(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(field, f"expected str, got {type(value).__name__}")
    if not value.strip():
        raise ValidationError(field, "cannot be empty")
    return value


def require_positive_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, f"expected int, got {type(value).__name__}")
    if value <= 0:
        raise ValidationError(field, f"must be > 0, got {value}")
    return value
