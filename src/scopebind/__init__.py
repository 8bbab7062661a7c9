"""Scoped dependency injection runtime.

This package resolves tokens (classes, strings or `Marker`s) to lazily constructed,
cached instances held in a tree of containers. Each logical execution context has
a current container; child scopes are entered with `scoped` and torn down when
their body completes.

Exports:
- `Container`: Resolution engine with `get`, `try_get`, `provide`, `scoped` and `scope`.
- `injectable`: Class decorator that registers a class as an injectable.
- `inject` / `inject_optional`: Resolve against the current container.
- `Marker`: Unique token that is only equal to itself.
- `OnDestroy`: Protocol for injectables that need a destructor at scope teardown.
- `DependencyTrace`: Context-local chain of tokens under construction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from ._container import ROOT_NAME, Container
from ._errors import CircularDependencyError, DuplicateTokenError, InjectionError, MissingTokenError
from ._lifecycle import OnDestroy
from ._registry import InjectableConfig, Registry, injectable, registry
from ._token import Marker, token_label
from ._trace import DependencyTrace


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ._token import Token

T = TypeVar("T")


def inject(token: Token[T]) -> Any:
    """Resolve `token` against the current container (see `Container.get`)."""
    return Container.current().get(token)


def inject_optional(token: Token[T]) -> Any | None:
    """Resolve `token` against the current container, or None if nothing is cached."""
    return Container.current().try_get(token)


async def scoped(name: str, body: Callable[[], Awaitable[T] | T]) -> T:
    """Run `body` in a child scope of the current container."""
    return await Container.current().scoped(name, body)


__all__ = [
    "ROOT_NAME",
    "CircularDependencyError",
    "Container",
    "DependencyTrace",
    "DuplicateTokenError",
    "InjectableConfig",
    "InjectionError",
    "Marker",
    "MissingTokenError",
    "OnDestroy",
    "Registry",
    "inject",
    "inject_optional",
    "injectable",
    "registry",
    "scoped",
    "token_label",
]
