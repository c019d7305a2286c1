"""
Pulse Reactive — Computed Values
===================================
Derived values recomputed on every read.
No caching: a computed value can never be stale.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")


class Computed(Generic[T]):
    """A derived value backed by a zero-argument getter."""

    def __init__(self, getter: Callable[[], T]) -> None:
        if not callable(getter):
            raise TypeError(
                f"Computed getter must be callable, got {type(getter)}."
            )
        self._getter = getter

    @property
    def value(self) -> T:
        return self._getter()

    def __call__(self) -> T:
        return self._getter()

    def __repr__(self) -> str:
        name = getattr(self._getter, "__qualname__", "getter")
        return f"Computed({name})"


def computed(getter: Callable[[], Any]) -> Computed:
    return Computed(getter)
