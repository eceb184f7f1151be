from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Tuple, Type, TypeVar

import grpc
import msgspec

from .config import ClientConfig
from .errors import (
    BrokerRejectedError,
    CanceledError,
    ConnectionUnavailableError,
    DeadlineExceededError,
    TransportError,
    TransportInternalError,
)
from .wire_protocol import PROTOCOL_VERSION_HEADER, method_path, wire_protocol_version_string

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Status codes meaning the broker saw the command and refused it.
_REJECTION_CODES = frozenset(
    {
        grpc.StatusCode.INVALID_ARGUMENT,
        grpc.StatusCode.NOT_FOUND,
        grpc.StatusCode.ALREADY_EXISTS,
        grpc.StatusCode.FAILED_PRECONDITION,
        grpc.StatusCode.PERMISSION_DENIED,
        grpc.StatusCode.UNAUTHENTICATED,
        grpc.StatusCode.RESOURCE_EXHAUSTED,
        grpc.StatusCode.ABORTED,
        grpc.StatusCode.OUT_OF_RANGE,
    }
)

_TRANSPORT_CODES: Dict[grpc.StatusCode, Type[TransportError]] = {
    grpc.StatusCode.UNAVAILABLE: ConnectionUnavailableError,
    grpc.StatusCode.DEADLINE_EXCEEDED: DeadlineExceededError,
    grpc.StatusCode.CANCELLED: CanceledError,
}


class Transport(Protocol):
    """Channel that carries one request to the broker and returns its response.

    Implementations raise TransportError subclasses when the broker could not
    be reached and BrokerRejectedError when the broker refused the request.
    They must be safe for concurrent invoke() calls.
    """

    def invoke(
        self,
        method: str,
        request: msgspec.Struct,
        response_type: Type[T],
        timeout: Optional[float],
    ) -> T:
        ...

    def close(self) -> None:
        ...


def error_from_rpc(e: grpc.RpcError) -> Exception:
    """Translate a grpc.RpcError into the client's error taxonomy."""
    code = e.code() if hasattr(e, "code") and callable(e.code) else grpc.StatusCode.UNKNOWN  # type: ignore
    details = e.details() if hasattr(e, "details") and callable(e.details) else str(e)  # type: ignore
    details = details or ""
    if code in _REJECTION_CODES:
        return BrokerRejectedError(code.name.lower(), details)
    cls = _TRANSPORT_CODES.get(code, TransportInternalError)
    name = code.name.lower() if isinstance(code, grpc.StatusCode) else "unknown"
    return cls(details or name, code=name)


class _AuthInterceptor(grpc.UnaryUnaryClientInterceptor):
    def __init__(self, token: str):
        self._token = token

    def intercept_unary_unary(self, continuation, client_call_details, request):
        metadata = list(client_call_details.metadata or [])
        metadata.append(("authorization", f"Bearer {self._token}"))
        new_details = client_call_details._replace(metadata=metadata)
        return continuation(new_details, request)


class GrpcTransport:
    """Transport backed by a grpc channel to the broker gateway."""

    def __init__(
        self,
        address: str,
        *,
        use_tls: bool = False,
        root_certificates: Optional[bytes] = None,
        auth_token: Optional[str] = None,
        options: Sequence[Tuple[str, Any]] = (),
    ) -> None:
        self.address = address
        self._lock = threading.Lock()
        self._closed = False
        self._calls: Dict[str, grpc.UnaryUnaryMultiCallable] = {}
        self._metadata = ((PROTOCOL_VERSION_HEADER, wire_protocol_version_string()),)

        if use_tls:
            creds = grpc.ssl_channel_credentials(root_certificates=root_certificates)
            channel = grpc.secure_channel(address, creds, options=list(options))
        else:
            channel = grpc.insecure_channel(address, options=list(options))

        interceptors = []
        if auth_token:
            interceptors.append(_AuthInterceptor(auth_token))
        if interceptors:
            channel = grpc.intercept_channel(channel, *interceptors)
        self._channel = channel
        logger.debug(f"Opened gRPC channel to {address} (tls={use_tls})")

    @classmethod
    def from_config(cls, config: ClientConfig) -> "GrpcTransport":
        root_certificates = None
        if config.ca_certificate_path:
            root_certificates = Path(config.ca_certificate_path).expanduser().read_bytes()
        return cls(
            config.gateway_address,
            use_tls=config.use_tls,
            root_certificates=root_certificates,
            auth_token=config.auth_token,
        )

    def _callable(self, method: str, response_type: type) -> grpc.UnaryUnaryMultiCallable:
        with self._lock:
            if self._closed:
                raise ConnectionUnavailableError("transport is closed", code="closed")
            call = self._calls.get(method)
            if call is None:
                decoder: Callable[[bytes], Any] = msgspec.msgpack.Decoder(response_type).decode
                call = self._channel.unary_unary(
                    method_path(method),
                    request_serializer=msgspec.msgpack.encode,
                    response_deserializer=decoder,
                )
                self._calls[method] = call
            return call

    def invoke(
        self,
        method: str,
        request: msgspec.Struct,
        response_type: Type[T],
        timeout: Optional[float],
    ) -> T:
        call = self._callable(method, response_type)
        try:
            return call(request, timeout=timeout, metadata=self._metadata)
        except grpc.RpcError as e:
            raise error_from_rpc(e) from e

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._calls.clear()
        self._channel.close()
        logger.debug(f"gRPC channel to {self.address} closed.")
