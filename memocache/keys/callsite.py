"""
memocache - Call-Site Key Derivation

Derives the canonical cache key of one invocation from the call-site identity
(module, enclosing class, callable name, parameter groups) and the actual
argument values.

Key format:
    module.Owner.name(a, b)(kw)                 # KeyDerivationPolicy.IDENTITY
    module.Owner(ctor1, ctor2).name(a, b)(kw)   # IDENTITY_WITH_CONSTRUCTOR_ARGS

The call site is computed once, when a callable is decorated; only argument
rendering happens per call.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel

from ..errors import KeyRenderingError
from .rendering import render_value

# Receiver parameter names that are never rendered as arguments
INSTANCE_RECEIVER = "self"
CLASS_RECEIVER = "cls"

CONSTRUCTOR_ARGS_HOOK = "__memocache_args__"

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL,
)


class KeyDerivationPolicy(str, Enum):
    """Which call-site identity elements are included in derived keys."""

    IDENTITY = "identity"
    IDENTITY_WITH_CONSTRUCTOR_ARGS = "identity_with_constructor_args"


@dataclass(frozen=True)
class CallSite:
    """
    Statically-known identity of a memoized callable.

    Attributes:
        module: Dotted module path the callable is defined in
        name: Callable name
        param_groups: Ordered groups of ordered parameter names
        owner: Qualified name of the enclosing class (or local scope), if any
        receiver: Name of the bound receiver parameter ("self"/"cls"), if any
        var_positional: Name of the *args parameter, if any
        var_keyword: Name of the **kwargs parameter, if any
    """

    module: str
    name: str
    param_groups: tuple[tuple[str, ...], ...]
    owner: str | None = None
    receiver: str | None = None
    var_positional: str | None = None
    var_keyword: str | None = None

    @property
    def scope_path(self) -> str:
        """Dotted scope path, e.g. ``app.repo.Repo.find``."""
        return ".".join(part for part in (self.module, self.owner, self.name) if part)

    @classmethod
    def for_callable(
        cls,
        func: Callable[..., Any],
        param_groups: Sequence[Sequence[str]] | None = None,
    ) -> CallSite:
        """
        Build the call site of a function from its module, qualified name and signature.

        By default regular parameters form the first group and keyword-only
        parameters (plus ``**kwargs``) the second. A leading ``self``/``cls``
        parameter of a function defined in a class is the receiver.

        Args:
            func: Function to describe
            param_groups: Explicit grouping of parameter names overriding the default

        Raises:
            ValueError: If explicit groups do not name every parameter exactly once
        """
        qualname = func.__qualname__
        owner, _, name = qualname.rpartition(".")
        signature = inspect.signature(func)
        params = list(signature.parameters.values())

        # Functions nested in a function body have no receiver
        in_class = bool(owner) and owner.rpartition(".")[2] != "<locals>"

        receiver = None
        if in_class and params and params[0].name in (INSTANCE_RECEIVER, CLASS_RECEIVER):
            receiver = params[0].name
            params = params[1:]

        var_positional = next((p.name for p in params if p.kind is inspect.Parameter.VAR_POSITIONAL), None)
        var_keyword = next((p.name for p in params if p.kind is inspect.Parameter.VAR_KEYWORD), None)

        if param_groups is None:
            positional = tuple(p.name for p in params if p.kind in _POSITIONAL_KINDS)
            keyword = tuple(p.name for p in params if p.kind not in _POSITIONAL_KINDS)
            groups: tuple[tuple[str, ...], ...] = (positional, keyword) if keyword else (positional,)
        else:
            groups = tuple(tuple(group) for group in param_groups)
            declared = sorted(p.name for p in params)
            named = sorted(n for group in groups for n in group)
            if declared != named:
                raise ValueError(
                    f"param_groups for {qualname} must name every parameter exactly once: "
                    f"expected {declared}, got {named}"
                )

        return cls(
            module=func.__module__,
            name=name,
            param_groups=groups,
            owner=owner or None,
            receiver=receiver,
            var_positional=var_positional,
            var_keyword=var_keyword,
        )


def render_constructor_args(instance: Any) -> str:
    """
    Render the construction parameters of an enclosing instance as one group.

    Uses ``instance.__memocache_args__()`` when defined. Pydantic models render
    their field values in declaration order. Otherwise reads the attributes
    named like the ``__init__`` parameters (``name`` or ``_name``).

    Raises:
        KeyRenderingError: If a constructor argument is not stored on the instance,
            or the constructor only takes ``*args``/``**kwargs``
    """
    hook = getattr(instance, CONSTRUCTOR_ARGS_HOOK, None)
    if hook is not None:
        return _render_group(hook())

    if isinstance(instance, BaseModel):
        return _render_group([getattr(instance, name) for name in type(instance).model_fields])

    init = type(instance).__init__
    if init is object.__init__:
        return "()"

    params = list(inspect.signature(init).parameters.values())[1:]
    named = [p for p in params if p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)]
    if params and not named:
        raise KeyRenderingError(
            instance,
            f"constructor only takes *args/**kwargs; define {CONSTRUCTOR_ARGS_HOOK}() "
            "to supply constructor arguments",
        )

    values = []
    for param in named:
        for attr in (param.name, f"_{param.name}"):
            if hasattr(instance, attr):
                values.append(getattr(instance, attr))
                break
        else:
            raise KeyRenderingError(
                instance,
                f"constructor argument '{param.name}' is not stored on the instance; "
                f"define {CONSTRUCTOR_ARGS_HOOK}() to supply constructor arguments",
            )
    return _render_group(values)


def derive_key(
    call_site: CallSite,
    arguments: Mapping[str, Any],
    policy: KeyDerivationPolicy = KeyDerivationPolicy.IDENTITY,
    instance: Any = None,
) -> str:
    """
    Derive the canonical key for one invocation.

    Args:
        call_site: Identity of the callable
        arguments: Bound argument values by parameter name, defaults applied
        policy: Key derivation policy
        instance: Enclosing instance (the ``self`` receiver), if any

    Returns:
        Canonical key string

    Raises:
        KeyRenderingError: If an argument has no deterministic rendering
    """
    parts = [call_site.module] if call_site.module else []
    if call_site.owner:
        owner = call_site.owner
        if (
            policy == KeyDerivationPolicy.IDENTITY_WITH_CONSTRUCTOR_ARGS
            and call_site.receiver == INSTANCE_RECEIVER
            and instance is not None
        ):
            owner += render_constructor_args(instance)
        parts.append(owner)
    parts.append(call_site.name)

    key = ".".join(parts)
    for group in call_site.param_groups:
        key += _render_group(_group_values(call_site, group, arguments))
    return key


def _group_values(call_site: CallSite, group: tuple[str, ...], arguments: Mapping[str, Any]) -> list[Any]:
    """Flatten one parameter group into the values to render, expanding *args and **kwargs."""
    values: list[Any] = []
    for name in group:
        if name == call_site.var_positional:
            values.extend(arguments.get(name, ()))
        elif name == call_site.var_keyword:
            extra = arguments.get(name, {})
            values.extend(_KeywordArgument(k, extra[k]) for k in sorted(extra))
        else:
            values.append(arguments[name])
    return values


def _render_group(values: Sequence[Any]) -> str:
    return "(" + ", ".join(render_value(value) for value in values) + ")"


@dataclass(frozen=True)
class _KeywordArgument:
    """An extra **kwargs entry, rendered as ``name=value``."""

    name: str
    value: Any

    def __memocache_key__(self) -> str:
        return f"{self.name}={render_value(self.value)}"
