"""
memocache - Key Builder

Combines an ordered list of heterogeneous key parts into one canonical key.
Single place for the multi-part key format.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .rendering import render_part

DEFAULT_SEPARATOR = ":"


@dataclass(frozen=True)
class KeyBuilder:
    """
    Joins rendered key parts with a separator and an optional prefix.

    Example:
        >>> KeyBuilder().build(["foo", 123, "bar"])
        'foo:123:bar'
        >>> KeyBuilder(prefix="app").build(["user", 7])
        'app:user:7'
    """

    separator: str = DEFAULT_SEPARATOR
    prefix: str | None = None

    def __post_init__(self) -> None:
        if not self.separator:
            raise ValueError("separator must be a non-empty string")

    def build(self, parts: Sequence[Any]) -> str:
        """
        Render each part and join them into one key.

        Raises:
            ValueError: If no parts are given
            KeyRenderingError: If a part has no deterministic rendering
        """
        if not parts:
            raise ValueError("at least one key part is required")

        return self.qualify(self.separator.join(render_part(part) for part in parts))

    def qualify(self, key: str) -> str:
        """Apply the prefix to an already-built key (e.g. a derived call-site key)."""
        if self.prefix:
            return f"{self.prefix}{self.separator}{key}"
        return key
