from __future__ import annotations

from ._token import token_label


class InjectionError(RuntimeError):
    pass


class MissingTokenError(InjectionError, LookupError):
    """Raised when a token has no cached instance and no registered injectable."""

    def __init__(self, container: str, token: object) -> None:
        self.container = container
        self.token = token
        msg = (
            f"Missing token in container {container}: {token_label(token)}. "
            "Did you forget to provide a value for this token?"
        )
        super().__init__(msg)


class DuplicateTokenError(InjectionError, LookupError):
    """Raised when providing a token that the container already holds."""

    def __init__(self, container: str, token: object) -> None:
        self.container = container
        self.token = token
        msg = f"Trying to define a duplicate token in container {container}: {token_label(token)}."
        super().__init__(msg)


class CircularDependencyError(InjectionError):
    """Raised when constructing a token re-enters a token already under construction.

    `path` is the minimal cycle, e.g. ``["A", "B", "A"]``. The trace does not know
    about containers, so `container` is filled in by the container that discovered
    the cycle.
    """

    def __init__(self, path: list[str]) -> None:
        super().__init__(path)
        self.path = path
        self.container: str | None = None

    def __str__(self) -> str:
        return f"Circular dependency detected in container {self.container or '<unknown>'}: {'➤'.join(self.path)}"
