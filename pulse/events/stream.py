"""
Pulse Event Bus — Streams
============================
A stream turns one event into a reactive cell holding the
latest payload and the number of payloads seen.

The stream owns exactly one internal listener on its bus.
destroy() removes that listener only; listeners added through
subscribe() belong to the caller and stay registered.
"""

from typing import TYPE_CHECKING, Any, Callable

from pulse.reactive import ReactiveState, ReadOnlyView, batch

if TYPE_CHECKING:
    from pulse.events.bus import EventBus


class EventStream:
    """Live view of the latest payload and count for one event."""

    def __init__(self, bus: "EventBus", event: str) -> None:
        self._bus = bus
        self._event = event
        self._cell = ReactiveState(value=None, count=0)
        self._state = ReadOnlyView(self._cell)
        self._unsubscribe = bus.on(event, self._receive)
        self._destroyed = False

    def _receive(self, payload: Any) -> None:
        with batch():
            self._cell.value = payload
            self._cell.count += 1

    @property
    def event(self) -> str:
        return self._event

    @property
    def state(self) -> ReadOnlyView:
        return self._state

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def subscribe(self, callback: Callable[[Any], Any]) -> Callable[[], None]:
        """Add an independent listener on the stream's event."""
        return self._bus.on(self._event, callback)

    def observe(self, callback: Callable[[ReactiveState], Any]) -> Callable[[], None]:
        """Observe the cell: one call per committed update."""
        return self._cell.subscribe(callback)

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        self._unsubscribe()

    def __repr__(self) -> str:
        return (
            f"EventStream({self._event!r}, count={self._cell.count}, "
            f"destroyed={self._destroyed})"
        )
