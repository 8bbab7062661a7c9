from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from ._token import token_label


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._token import Token

C = TypeVar("C", bound=type)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InjectableConfig:
    constructor: Callable[[], Any]
    token: Any
    root: bool = False  # cache in the root container regardless of the resolving scope


class Registry:
    """Process-wide mapping from token to construction metadata.

    Containers only read from it; it is meant to be populated at import time,
    before resolution starts.
    """

    def __init__(self) -> None:
        self._configs: dict[Any, InjectableConfig] = {}

    def register(self, token: Token[Any], constructor: Callable[[], Any], *, root: bool = False) -> None:
        if token in self._configs:
            logger.debug("Replacing injectable for token %s", token_label(token))
        self._configs[token] = InjectableConfig(constructor=constructor, token=token, root=root)
        logger.debug("Registered injectable %s (root=%s)", token_label(token), root)

    def get(self, token: Token[Any]) -> InjectableConfig | None:
        return self._configs.get(token)

    def clear(self) -> None:
        self._configs.clear()

    def __contains__(self, token: object) -> bool:
        return token in self._configs

    def __len__(self) -> int:
        return len(self._configs)


registry = Registry()


def injectable(token: Token[Any] | None = None, *, root: bool = False) -> Callable[[C], C]:
    """Class decorator registering the class as an injectable.

    Example:
      @injectable()
      class Mailer: ...

      @injectable("settings", root=True)
      class Settings: ...

    The class is registered under `token`, or under itself when no token is given,
    and returned unchanged.
    """

    def decorator(cls: C) -> C:
        registry.register(cls if token is None else token, cls, root=root)
        return cls

    return decorator
