from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import tomllib

DEFAULT_GATEWAY_ADDRESS = "127.0.0.1:26500"
DEFAULT_REQUEST_TIMEOUT_S = 15.0
DEFAULT_CLOSE_TIMEOUT_S = 10.0

_TRUE_VALUES = frozenset({"true", "1", "t", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"false", "0", "f", "no", "n", "off", ""})


@dataclass(frozen=True)
class ClientConfig:
    """Connection and timeout settings for a BrokerClient."""

    gateway_address: str = DEFAULT_GATEWAY_ADDRESS
    use_tls: bool = False
    ca_certificate_path: Optional[str] = None
    auth_token: Optional[str] = None
    # None disables the per-request deadline.
    request_timeout_s: Optional[float] = DEFAULT_REQUEST_TIMEOUT_S
    close_timeout_s: Optional[float] = DEFAULT_CLOSE_TIMEOUT_S

    def __post_init__(self) -> None:
        if not (self.gateway_address or "").strip():
            raise ValueError("gateway_address is required")
        if self.request_timeout_s is not None and self.request_timeout_s <= 0:
            raise ValueError("request_timeout_s must be > 0")
        if self.close_timeout_s is not None and self.close_timeout_s < 0:
            raise ValueError("close_timeout_s must be >= 0")
        if self.ca_certificate_path and not self.use_tls:
            raise ValueError("ca_certificate_path requires use_tls")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """
        Build a config from BROKER_* environment variables.

        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {}
        if "BROKER_ADDRESS" in env:
            kwargs["gateway_address"] = env["BROKER_ADDRESS"].strip()
        if "BROKER_USE_TLS" in env:
            kwargs["use_tls"] = _parse_bool(env["BROKER_USE_TLS"], field="BROKER_USE_TLS")
        if env.get("BROKER_CA_CERTIFICATE_PATH"):
            kwargs["ca_certificate_path"] = env["BROKER_CA_CERTIFICATE_PATH"].strip()
        if env.get("BROKER_AUTH_TOKEN"):
            kwargs["auth_token"] = env["BROKER_AUTH_TOKEN"].strip()
        if "BROKER_REQUEST_TIMEOUT" in env:
            kwargs["request_timeout_s"] = _parse_timeout(env["BROKER_REQUEST_TIMEOUT"], field="BROKER_REQUEST_TIMEOUT")
        if "BROKER_CLOSE_TIMEOUT" in env:
            kwargs["close_timeout_s"] = _parse_timeout(env["BROKER_CLOSE_TIMEOUT"], field="BROKER_CLOSE_TIMEOUT")
        return cls(**kwargs)

    @classmethod
    def from_toml(cls, path: str | Path) -> "ClientConfig":
        """Load the `[client]` table of a TOML file."""
        p = Path(path)
        with p.open("rb") as f:
            data = tomllib.load(f)
        table = data.get("client")
        if table is None:
            return cls()
        if not isinstance(table, dict):
            raise ValueError(f"{p}: [client] must be a table")
        return cls.from_mapping(table)

    @classmethod
    def from_mapping(cls, table: Mapping[str, Any]) -> "ClientConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(table) - known)
        if unknown:
            raise ValueError(f"unknown client config keys: {', '.join(unknown)}")
        kwargs = dict(table)
        if "use_tls" in kwargs and not isinstance(kwargs["use_tls"], bool):
            raise ValueError("use_tls must be a boolean")
        for key in ("request_timeout_s", "close_timeout_s"):
            if key in kwargs and kwargs[key] is not None:
                value = kwargs[key]
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"{key} must be a number")
                kwargs[key] = float(value)
        return cls(**kwargs)


def _parse_bool(raw: str, *, field: str) -> bool:
    s = (raw or "").strip().lower()
    if s in _TRUE_VALUES:
        return True
    if s in _FALSE_VALUES:
        return False
    raise ValueError(f"{field}: invalid boolean {raw!r}")


def _parse_timeout(raw: str, *, field: str) -> Optional[float]:
    s = (raw or "").strip().lower()
    if s in ("", "none"):
        return None
    try:
        return float(s)
    except ValueError:
        raise ValueError(f"{field}: invalid number {raw!r}") from None
