from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

import msgspec

from ..errors import ValidationError
from ..protocol import CreateJobRequest, CreateJobResponse
from ..variables import encode_variables_map
from .base import CommandKind, CommandStep, FinalCommandStep, VariablesStep, require_positive_int, require_text

DEFAULT_JOB_RETRIES = 3


@dataclass(frozen=True)
class CreateJobResult:
    key: int


class CreateJobCommandStep1(CommandStep):
    __slots__ = ()

    def job_type(self, job_type: str) -> "CreateJobCommandStep2":
        self._request.job_type = require_text(job_type, "job_type")
        return self._next(CreateJobCommandStep2)


class CreateJobCommandStep2(VariablesStep["CreateJobCommandStep3"]):
    """Variables are required for a job; any variables_* call moves on."""

    __slots__ = ()


class CreateJobCommandStep3(VariablesStep["CreateJobCommandStep3"], FinalCommandStep[CreateJobResult]):
    __slots__ = ()

    def _headers(self) -> Dict[str, Any]:
        raw = self._request.custom_headers
        if not raw:
            return {}
        # Already validated on the way in.
        return msgspec.json.decode(raw)

    def retries(self, retries: int) -> "CreateJobCommandStep3":
        self._request.retries = require_positive_int(retries, "retries")
        return self

    def add_custom_header(self, key: str, value: Any) -> "CreateJobCommandStep3":
        key = require_text(key, "custom header key")
        headers = self._headers()
        headers[key] = value
        self._request.custom_headers = encode_variables_map(headers, field=f"custom header {key!r}")
        return self

    def custom_headers(self, headers: Mapping[str, Any]) -> "CreateJobCommandStep3":
        """Replace all custom headers."""
        for key in headers:
            if not isinstance(key, str) or not key.strip():
                raise ValidationError("custom_headers", f"invalid header key {key!r}")
        self._request.custom_headers = encode_variables_map(headers, field="custom_headers") if headers else ""
        return self


CreateJobCommandStep2._after_variables = CreateJobCommandStep3


def _to_result(request: CreateJobRequest, response: CreateJobResponse) -> CreateJobResult:
    return CreateJobResult(key=response.key)


CREATE_JOB = CommandKind(
    name="CreateJob",
    method="CreateJob",
    request_type=CreateJobRequest,
    response_type=CreateJobResponse,
    steps=(CreateJobCommandStep1, CreateJobCommandStep2, CreateJobCommandStep3),
    to_result=_to_result,
)
