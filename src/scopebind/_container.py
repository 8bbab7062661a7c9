from __future__ import annotations

import inspect
import logging
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    TypeVar,
    overload,
)

from ._errors import CircularDependencyError, DuplicateTokenError, MissingTokenError
from ._lifecycle import OnDestroy
from ._registry import registry
from ._token import Marker, token_label
from ._trace import DependencyTrace


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterator

    from ._token import Token

T = TypeVar("T")

ROOT_NAME = "root"

_MISSING = object()

_current: ContextVar[Container | None] = ContextVar("scopebind_current_container", default=None)


class Container:
    """A node in the container tree.

    - caches instances per token, at most one each, never replaced
    - looks up the parent chain before constructing anything
    - constructs registered injectables on a full miss
    - runs code in child scopes that are torn down afterwards.
    """

    _root: ClassVar[Container]

    def __init__(self, name: str, parent: Container | None = None, *, _internal: bool = False) -> None:
        if not _internal:
            msg = "Containers must be created via Container.scoped() or Container.scope()"
            raise RuntimeError(msg)
        self.name = name
        self.parent = parent
        self._instances: dict[Any, Any] = {}
        self._lock = threading.RLock()
        self._retired = False

    def __repr__(self) -> str:
        return f"Container({self.name!r})"

    @classmethod
    def root(cls) -> Container:
        return cls._root

    @classmethod
    def current(cls) -> Container:
        """Return the container bound to the current execution context, or the root container."""
        container = _current.get()
        return cls._root if container is None else container

    @overload
    def get(self, token: type[T]) -> T: ...

    @overload
    def get(self, token: str | Marker) -> Any: ...

    def get(self, token: Token[T]) -> object:
        """Resolve the token to an instance.

        Checks this container and then every ancestor up to the root. If none of
        them holds an instance, a new one is constructed from the registry,
        relative to this container.

        Raises:
          MissingTokenError: nothing cached and nothing registered for `token`.
          CircularDependencyError: constructing `token` needs `token` again.
        """
        with self._lock:
            self._ensure_active()
            instance = self._lookup(token)
            if instance is _MISSING:
                instance = self._construct(token)
            return instance

    @overload
    def try_get(self, token: type[T]) -> T | None: ...

    @overload
    def try_get(self, token: str | Marker) -> Any | None: ...

    def try_get(self, token: Token[T]) -> object | None:
        """Like `get`, but returns None instead of constructing or raising."""
        self._ensure_active()
        instance = self._lookup(token)
        return None if instance is _MISSING else instance

    def provide(self, token: Token[T], instance: object) -> Container:
        """Bind a ready-made value to `token` in this container.

        Example:
          Container.current().provide("config", config).provide(Clock, FrozenClock())

        Only None is rejected as a value; falsy values like 0 or "" are valid.
        """
        with self._lock:
            self._ensure_active()
            if token in self._instances:
                raise DuplicateTokenError(self.name, token)

            if instance is None:
                msg = "Cannot provide None as a value"
                raise TypeError(msg)

            self._instances[token] = instance
            return self

    def has(self, token: Token[T]) -> bool:
        """Whether this container itself (not its ancestors) holds `token`."""
        self._ensure_active()
        return token in self._instances

    __contains__ = has

    async def scoped(self, name: str, body: Callable[[], Awaitable[T] | T]) -> T:
        """Run `body` in a new child scope of this container.

        The child is the current container while `body` runs, including across
        awaits and in tasks spawned from it. Once `body` settles, successfully or
        not, the child is torn down and the result or exception is passed on.
        """
        child = self._child(name)
        reset_token = _current.set(child)
        logger.debug("Entering scope %s", child.name)
        try:
            result = body()
            if inspect.isawaitable(result):
                result = await result
            return result
        finally:
            _current.reset(reset_token)
            child._clear()  # noqa: SLF001

    @contextmanager
    def scope(self, name: str) -> Iterator[Container]:
        """Synchronous counterpart of `scoped` for code outside an event loop.

        Example:
          with Container.current().scope("request") as request_scope:
              handle(inject(Request))
        """
        child = self._child(name)
        reset_token = _current.set(child)
        logger.debug("Entering scope %s", child.name)
        try:
            yield child
        finally:
            _current.reset(reset_token)
            child._clear()  # noqa: SLF001

    def _child(self, name: str) -> Container:
        self._ensure_active()
        return Container(f"{self.name}➤{name}", self, _internal=True)

    def _lookup(self, token: Token[T]) -> object:
        container: Container | None = self
        while container is not None:
            instance = container._instances.get(token, _MISSING)  # noqa: SLF001
            if instance is not _MISSING:
                return instance
            container = container.parent
        return _MISSING

    def _construct(self, token: Token[T]) -> object:
        try:
            return DependencyTrace.run(token_label(token), lambda: self._build(token), key=token)
        except CircularDependencyError as e:
            # Only the innermost container, where the cycle was found, is recorded.
            if e.container is None:
                e.container = self.name
            raise

    def _build(self, token: Token[T]) -> object:
        config = registry.get(token)
        if config is None:
            raise MissingTokenError(self.name, token)

        target = Container._root if config.root else self
        # Lock order is always this container, then root. Calling Container.root().get()
        # from a thread bound to a scope, with constructors that inject back through that
        # scope, can deadlock against a thread resolving root-pinned tokens in the scope.
        with target._lock:  # noqa: SLF001
            # Another scope may have built the root singleton in the meantime.
            existing = target._instances.get(token, _MISSING)  # noqa: SLF001
            if existing is not _MISSING:
                return existing

            instance = config.constructor()
            if instance is None:
                msg = f"Constructor for injectable {token_label(token)} returned None"
                raise TypeError(msg)

            target._instances[token] = instance  # noqa: SLF001

        logger.debug("Constructed %s in container %s", token_label(token), target.name)
        return instance

    def _ensure_active(self) -> None:
        if self._retired:
            msg = f"Container {self.name} has been torn down and can no longer be used"
            raise RuntimeError(msg)

    def _clear(self) -> None:
        """Run `on_destroy` on every cached instance, then drop them and retire the container."""
        with self._lock:
            try:
                for instance in list(self._instances.values()):
                    # Provided classes carry an unbound on_destroy; only instances are destroyed.
                    if not inspect.isclass(instance) and isinstance(instance, OnDestroy):
                        instance.on_destroy()
            finally:
                self._instances.clear()
                self._retired = True
        logger.debug("Tore down scope %s", self.name)


Container._root = Container(ROOT_NAME, _internal=True)  # noqa: SLF001
