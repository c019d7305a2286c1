"""
Pulse Reactive — Observable Records
======================================
A ReactiveState is a mutable record with a fixed set of fields
and a change channel.

Rules:
- Fields are declared at construction (no dynamic fields)
- Every write marks the record changed
- Outside a batch, observers are notified after each write
- Inside a batch, observers are notified once at commit
- Observer failures are logged and never reach the writer
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from pulse.reactive.batching import mark_changed

logger = logging.getLogger("pulse.reactive")

Observer = Callable[["ReactiveState"], None]


# ══════════════════════════════════════════════════════════════
# REACTIVE STATE
# ══════════════════════════════════════════════════════════════

class ReactiveState:
    """
    Observable record.

    Usage:
        state = ReactiveState(count=0)
        unsubscribe = state.subscribe(lambda s: print(s.count))
        state.count += 1
    """

    def __init__(self, **fields: Any) -> None:
        for name in fields:
            if name.startswith("_") or hasattr(type(self), name):
                raise ValueError(
                    f"Field name '{name}' is reserved on ReactiveState."
                )
        object.__setattr__(self, "_fields", dict(fields))
        object.__setattr__(self, "_observers", [])

    def __getattr__(self, name: str) -> Any:
        fields = self.__dict__.get("_fields", {})
        try:
            return fields[name]
        except KeyError:
            raise AttributeError(
                f"ReactiveState has no field '{name}'."
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in self._fields:
            raise AttributeError(
                f"ReactiveState has no field '{name}'."
            )
        self._fields[name] = value
        mark_changed(self)

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v!r}" for k, v in self._fields.items())
        return f"ReactiveState({body})"

    def fields(self) -> tuple:
        return tuple(self._fields)

    def to_dict(self) -> Dict[str, Any]:
        """Return a detached snapshot of all fields."""
        return dict(self._fields)

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register an observer on the change channel.

        Returns an unsubscribe callable. Calling it twice is a no-op.
        """
        if not callable(observer):
            raise TypeError(
                f"Observer must be callable, got {type(observer)}."
            )
        observers: List[Observer] = self._observers
        observers.append(observer)

        def unsubscribe() -> None:
            try:
                observers.remove(observer)
            except ValueError:
                pass

        return unsubscribe

    def observer_count(self) -> int:
        return len(self._observers)

    def notify(self) -> None:
        """Deliver one change notification to every observer."""
        for observer in tuple(self._observers):
            try:
                observer(self)
            except Exception as exc:
                name = getattr(observer, "__qualname__", str(observer))
                logger.error(
                    f"Observer failed: {name}: {exc}",
                    exc_info=True,
                )


# ══════════════════════════════════════════════════════════════
# READ-ONLY VIEW
# ══════════════════════════════════════════════════════════════

class ReadOnlyView:
    """
    Live, read-only window onto a ReactiveState.

    Reads always reflect the current field values.
    Writes raise AttributeError.
    """

    __slots__ = ("_state",)

    def __init__(self, state: ReactiveState) -> None:
        object.__setattr__(self, "_state", state)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._state, name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Field '{name}' is read-only.")

    def __repr__(self) -> str:
        return f"ReadOnlyView({self._state!r})"

    def to_dict(self) -> Dict[str, Any]:
        return self._state.to_dict()

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        return self._state.subscribe(observer)
