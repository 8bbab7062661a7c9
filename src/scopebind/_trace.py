from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, TypeVar

from ._errors import CircularDependencyError


if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

T = TypeVar("T")

# (key, label) frames; keys are compared, labels are reported.
_frames: ContextVar[tuple[tuple[Any, str], ...]] = ContextVar("scopebind_trace_frames", default=())

_NO_KEY = object()


class DependencyTrace:
    """Tracks the chain of tokens under construction in the current context.

    The chain lives in a ContextVar, so each asyncio task (or thread) sees its own
    chain and tasks spawned during construction inherit a copy of it.
    """

    @staticmethod
    def path() -> tuple[str, ...]:
        return tuple(label for _, label in _frames.get())

    @staticmethod
    @contextmanager
    def frame(label: str, key: Any = _NO_KEY) -> Iterator[None]:
        """Push `label` for the duration of the block.

        Frames are matched by `key` (the label itself when no key is given), so two
        distinct tokens sharing a display label are not mistaken for a cycle.
        Raises CircularDependencyError with the minimal cycle when `key` is
        already being constructed. On exit the chain is reset to the exact
        snapshot taken on entry, whether or not the block raised.
        """
        if key is _NO_KEY:
            key = label

        current = _frames.get()
        keys = [k for k, _ in current]
        if key in keys:
            cycle = [lbl for _, lbl in current[keys.index(key) :]]
            raise CircularDependencyError([*cycle, label])

        reset_token = _frames.set((*current, (key, label)))
        try:
            yield
        finally:
            _frames.reset(reset_token)

    @staticmethod
    def run(label: str, body: Callable[[], T], *, key: Any = _NO_KEY) -> T:
        with DependencyTrace.frame(label, key):
            return body()
