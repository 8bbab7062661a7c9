from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, TypeVar


class Marker:
    """Opaque injection token that is only ever equal to itself.

    Two markers created with the same label are still distinct tokens; the
    label is used for display only.
    """

    __slots__ = ("label",)

    def __init__(self, label: str = "") -> None:
        self.label = label

    def __str__(self) -> str:
        return f"Marker({self.label})"

    __repr__ = __str__


if TYPE_CHECKING:
    T = TypeVar("T")

    Token = type[T] | str | Marker


def token_label(token: object) -> str:
    """Display form of a token, used in trace frames and error messages."""
    if inspect.isclass(token):
        return token.__name__
    return str(token)
