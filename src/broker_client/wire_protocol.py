from __future__ import annotations

# Client<->gateway gRPC wire protocol version.
# MAJOR: breaking changes, MINOR: additive/backward-compatible changes.
WIRE_PROTOCOL_MAJOR = 1
WIRE_PROTOCOL_MINOR = 0

GATEWAY_SERVICE = "gateway_protocol.Gateway"
PROTOCOL_VERSION_HEADER = "x-broker-protocol"

# Sentinel understood by the broker as "latest deployed version".
LATEST_VERSION = -1


def wire_protocol_version_string() -> str:
    return f"{WIRE_PROTOCOL_MAJOR}.{WIRE_PROTOCOL_MINOR}"


def method_path(method: str) -> str:
    return f"/{GATEWAY_SERVICE}/{method}"
