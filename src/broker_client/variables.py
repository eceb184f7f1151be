from __future__ import annotations

import math
from typing import IO, Any, Mapping, Union

import msgspec

from .errors import ValidationError

_json_encoder = msgspec.json.Encoder()


def _as_object(value: Any, field: str) -> dict:
    if not isinstance(value, dict):
        raise ValidationError(field, f"must be a JSON object, got {type(value).__name__}")
    return value


def _check_finite(value: Any, field: str) -> None:
    # JSON has no NaN or Infinity; msgspec would quietly write them as null.
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(field, f"non-finite number {value!r} is not valid JSON")
    elif isinstance(value, dict):
        for item in value.values():
            _check_finite(item, field)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _check_finite(item, field)


def _dump(obj: dict, field: str) -> str:
    _check_finite(obj, field)
    return _json_encoder.encode(obj).decode("utf-8")


def encode_variables_document(document: Union[str, bytes], field: str = "variables") -> str:
    """Validate a JSON document and return it re-encoded compactly."""
    if isinstance(document, str):
        document = document.encode("utf-8")
    if not isinstance(document, (bytes, bytearray)):
        raise ValidationError(field, f"expected str or bytes, got {type(document).__name__}")
    if not document.strip():
        raise ValidationError(field, "document cannot be empty")
    try:
        decoded = msgspec.json.decode(document)
    except msgspec.DecodeError as e:
        raise ValidationError(field, f"invalid JSON: {e}") from e
    return _dump(_as_object(decoded, field), field)


def encode_variables_object(obj: Any, field: str = "variables") -> str:
    """
    Encode a mapping, msgspec.Struct, dataclass or anything else
    msgspec.to_builtins understands. The result must be a JSON object.
    """
    if obj is None:
        raise ValidationError(field, "cannot be None")
    try:
        builtins = msgspec.to_builtins(obj, str_keys=True)
    except (TypeError, ValueError) as e:
        raise ValidationError(field, f"not serializable: {e}") from e
    return _dump(_as_object(builtins, field), field)


def encode_variables_map(mapping: Mapping[str, Any], field: str = "variables") -> str:
    if not isinstance(mapping, Mapping):
        raise ValidationError(field, f"expected a mapping, got {type(mapping).__name__}")
    return encode_variables_object(dict(mapping), field)


def encode_variables_reader(reader: IO[Any], field: str = "variables") -> str:
    try:
        data = reader.read()
    except OSError as e:
        raise ValidationError(field, f"failed to read document: {e}") from e
    return encode_variables_document(data, field)
