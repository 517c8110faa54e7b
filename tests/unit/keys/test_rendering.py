"""
memocache - Key Part Rendering Tests
"""

from collections import namedtuple
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import PurePosixPath
from uuid import UUID

import pytest
from pydantic import BaseModel

from memocache.errors import KeyRenderingError
from memocache.keys import render_part, render_value


class Color(Enum):
    RED = "red"
    GREEN = "green"


@dataclass
class Point:
    x: int
    y: int


class Account(BaseModel):
    id: int
    tags: list[str]


Pair = namedtuple("Pair", ["left", "right"])


class Opaque:
    pass


class WithStr:
    def __init__(self, name: str):
        self.name = name

    def __str__(self) -> str:
        return f"WithStr<{self.name}>"


class WithKeyHook:
    def __memocache_key__(self) -> str:
        return "hooked"


class LeakyRepr:
    def __repr__(self) -> str:
        return object.__repr__(self)


class TestRenderPart:
    def test_top_level_strings_are_verbatim(self) -> None:
        assert render_part("users") == "users"
        assert render_part("") == ""

    def test_top_level_non_strings_are_rendered(self) -> None:
        assert render_part(123) == "123"
        assert render_part(None) == "None"
        assert render_part(Color.RED) == "Color.RED"


class TestRenderValue:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "None"),
            (True, "True"),
            (False, "False"),
            (42, "42"),
            (-1.5, "-1.5"),
            (Decimal("1.10"), "1.10"),
            ("text", "'text'"),
            (b"raw", "b'raw'"),
            (date(2024, 1, 2), "2024-01-02"),
            (datetime(2024, 1, 2, 3, 4, 5), "2024-01-02T03:04:05"),
            (timedelta(minutes=1), "0:01:00"),
            (UUID("12345678-1234-5678-1234-567812345678"), "12345678-1234-5678-1234-567812345678"),
            (PurePosixPath("/tmp/a"), "/tmp/a"),
            (Color.GREEN, "Color.GREEN"),
        ],
    )
    def test_scalars(self, value: object, expected: str) -> None:
        assert render_value(value) == expected

    def test_nested_strings_are_quoted(self) -> None:
        """A single string containing a comma differs from two strings."""
        assert render_value(("a, b",)) != render_value(("a", "b"))

    def test_sequences(self) -> None:
        assert render_value((1, "a")) == "(1, 'a')"
        assert render_value([1, [2, 3]]) == "[1, [2, 3]]"
        assert render_value(()) == "()"

    def test_sets_render_in_sorted_order(self) -> None:
        assert render_value({3, 1, 2}) == "{1, 2, 3}"
        assert render_value(frozenset()) == "set()"

    def test_mappings_render_in_sorted_order(self) -> None:
        assert render_value({"b": 2, "a": 1}) == "{'a': 1, 'b': 2}"
        assert render_value({"a": 1, "b": 2}) == render_value({"b": 2, "a": 1})

    def test_dataclass(self) -> None:
        assert render_value(Point(1, 2)) == "Point(x=1, y=2)"

    def test_pydantic_model(self) -> None:
        assert render_value(Account(id=7, tags=["x"])) == "Account(id=7, tags=['x'])"

    def test_namedtuple(self) -> None:
        assert render_value(Pair(1, "r")) == "Pair(left=1, right='r')"

    def test_custom_str(self) -> None:
        assert render_value(WithStr("ada")) == "WithStr<ada>"

    def test_key_hook_takes_precedence(self) -> None:
        assert render_value(WithKeyHook()) == "hooked"
        assert render_value([WithKeyHook()]) == "[hooked]"

    def test_rendering_is_deterministic(self) -> None:
        value = {"points": [Point(1, 2)], "tags": {"b", "a"}}

        assert render_value(value) == render_value(value)


class TestRenderingFailures:
    def test_plain_object_fails(self) -> None:
        with pytest.raises(KeyRenderingError) as exc_info:
            render_value(Opaque())

        assert exc_info.value.value_type == "Opaque"
        assert exc_info.value.code.value == "KEY_RENDERING_FAILURE"

    def test_nested_plain_object_fails(self) -> None:
        with pytest.raises(KeyRenderingError):
            render_value({"key": [Opaque()]})

    def test_repr_with_memory_address_fails(self) -> None:
        with pytest.raises(KeyRenderingError, match="memory address"):
            render_value(LeakyRepr())

    def test_self_referential_container_fails(self) -> None:
        items: list = [1]
        items.append(items)

        with pytest.raises(KeyRenderingError, match="self-referential"):
            render_value(items)

    def test_key_hook_must_return_str(self) -> None:
        class BadHook:
            def __memocache_key__(self) -> int:
                return 1

        with pytest.raises(KeyRenderingError):
            render_value(BadHook())
