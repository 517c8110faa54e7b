"""
memocache - Key Part Rendering

Turns arbitrary values into their canonical string rendering for use in
cache keys. Rendering is pure and deterministic: the same value always
renders to the same string, in any process.

Values without a deterministic rendering (plain objects whose only string
form is the default ``<Foo object at 0x...>``) raise KeyRenderingError.
"""

import dataclasses
import re
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from pathlib import PurePath
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from ..errors import KeyRenderingError

# Default object reprs embed the memory address, which changes per process
_ADDRESS_PATTERN = re.compile(r" at 0x[0-9a-fA-F]+")

KEY_HOOK = "__memocache_key__"

_NUMBER_TYPES = (int, float, Decimal, Fraction, complex)
_TEMPORAL_TYPES = (datetime, date, time)


def render_part(value: Any) -> str:
    """
    Render a top-level key part.

    Top-level strings are used verbatim; everything else goes through
    render_value.

    Raises:
        KeyRenderingError: If the value has no deterministic rendering
    """
    if isinstance(value, str) and not isinstance(value, Enum):
        return value
    return render_value(value)


def render_value(value: Any, _seen: frozenset[int] = frozenset()) -> str:
    """
    Render a value nested inside a key (an argument or container element).

    Nested strings are quoted so that ``("a, b")`` and ``("a", "b")`` differ.

    Raises:
        KeyRenderingError: If the value has no deterministic rendering
    """
    hook = getattr(type(value), KEY_HOOK, None)
    if hook is not None:
        rendered = hook(value)
        if not isinstance(rendered, str):
            raise KeyRenderingError(value, f"{KEY_HOOK}() must return str, got {type(rendered).__name__}")
        return rendered

    if value is None:
        return "None"

    if isinstance(value, Enum):
        return f"{type(value).__qualname__}.{value.name}"

    if isinstance(value, bool):
        return "True" if value else "False"

    if isinstance(value, str):
        return repr(value)

    if isinstance(value, _NUMBER_TYPES):
        return str(value)

    if isinstance(value, (bytes, bytearray)):
        return repr(bytes(value))

    if isinstance(value, _TEMPORAL_TYPES):
        return value.isoformat()

    if isinstance(value, (timedelta, UUID, PurePath)):
        return str(value)

    # Containers may reference themselves
    if id(value) in _seen:
        raise KeyRenderingError(value, "self-referential container")
    seen = _seen | {id(value)}

    if isinstance(value, tuple) and not hasattr(value, "_fields"):
        return "(" + ", ".join(render_value(item, seen) for item in value) + ")"

    if isinstance(value, list):
        return "[" + ", ".join(render_value(item, seen) for item in value) + "]"

    if isinstance(value, (set, frozenset)):
        if not value:
            return "set()"
        return "{" + ", ".join(sorted(render_value(item, seen) for item in value)) + "}"

    if isinstance(value, Mapping):
        items = sorted((render_value(k, seen), render_value(v, seen)) for k, v in value.items())
        return "{" + ", ".join(f"{k}: {v}" for k, v in items) + "}"

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = ", ".join(f"{f.name}={render_value(getattr(value, f.name), seen)}" for f in dataclasses.fields(value))
        return f"{type(value).__qualname__}({fields})"

    if isinstance(value, BaseModel):
        fields = ", ".join(f"{name}={render_value(getattr(value, name), seen)}" for name in type(value).model_fields)
        return f"{type(value).__qualname__}({fields})"

    if isinstance(value, tuple):
        # namedtuple
        fields = ", ".join(f"{name}={render_value(getattr(value, name), seen)}" for name in value._fields)
        return f"{type(value).__qualname__}({fields})"

    return _render_custom(value)


def _render_custom(value: Any) -> str:
    """Render an object through its own __str__ or __repr__, if it defines one."""
    cls = type(value)
    if cls.__str__ is not object.__str__:
        render = str
    elif cls.__repr__ is not object.__repr__:
        render = repr
    else:
        raise KeyRenderingError(
            value,
            f"type defines neither __str__, __repr__ nor {KEY_HOOK}()",
        )

    try:
        rendered = render(value)
    except Exception as e:
        raise KeyRenderingError(value, f"{render.__name__}() raised {type(e).__name__}: {e}") from e

    if _ADDRESS_PATTERN.search(rendered):
        raise KeyRenderingError(
            value,
            "rendering contains a memory address and is not stable across processes",
            details={"rendering": rendered[:100]},
        )
    return rendered
