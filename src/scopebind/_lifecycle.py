from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class OnDestroy(Protocol):
    """Optional destructor capability for injectables.

    When a scope is torn down, every cached instance implementing this protocol
    has `on_destroy` called once, synchronously, in no particular order. The
    instance is no longer reachable from any container afterwards.
    """

    def on_destroy(self) -> None: ...
