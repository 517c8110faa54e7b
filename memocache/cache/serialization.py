"""
memocache - Value Serialization

JSON codec shared by out-of-process backends (Redis, SQLite).

Values are encoded with pydantic-core, so Pydantic models, dataclasses,
datetimes, UUIDs and enums are stored as their JSON form. They are read back
as plain JSON data; memoized callables turn them back into their declared
result type.
"""

from typing import Any

from pydantic_core import PydanticSerializationError, from_json, to_json

from ..errors import BackendUnavailableError


def encode_value(value: Any, backend: str) -> bytes:
    """
    Serialize a value to JSON bytes.

    Raises:
        BackendUnavailableError: If the value cannot be serialized (not retryable)
    """
    try:
        return to_json(value)
    except PydanticSerializationError as e:
        raise BackendUnavailableError(
            backend,
            "put",
            f"value of type {type(value).__name__} is not JSON serializable",
            details={"value_type": type(value).__name__, "error": str(e)},
            retryable=False,
        ) from e


def decode_value(data: str | bytes, backend: str) -> Any:
    """
    Deserialize JSON bytes read from a backend.

    Raises:
        BackendUnavailableError: If the stored payload is not valid JSON (not retryable)
    """
    try:
        return from_json(data)
    except ValueError as e:
        preview = data[:100] if len(data) > 100 else data
        raise BackendUnavailableError(
            backend,
            "get",
            "stored payload is not valid JSON",
            details={"data_preview": repr(preview), "error": str(e)},
            retryable=False,
        ) from e
