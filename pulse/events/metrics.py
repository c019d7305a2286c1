"""
Pulse Event Bus — Metrics
============================
Read-only reactive view over a bus's dispatch counters,
plus derived aggregates.

Counters (owned and written by the bus only):
- total_events_emitted
- last_emitted_event
- active_listeners
- error_count

All metrics are in-memory: a new bus starts from zero.
"""

from typing import Any, Callable

from pulse.reactive import Computed, ReactiveState, ReadOnlyView, computed


def new_metrics_state() -> ReactiveState:
    return ReactiveState(
        total_events_emitted=0,
        last_emitted_event=None,
        active_listeners=0,
        error_count=0,
    )


def build_aggregates(state: ReactiveState) -> dict[str, Computed]:
    """
    Computed aggregates registered when enable_metrics is on.

    event_rate: running total of emissions
    error_rate: running total of listener failures
    """
    return {
        "event_rate": computed(lambda: state.total_events_emitted),
        "error_rate": computed(lambda: state.error_count),
    }


class BusMetrics:
    """
    Metrics facet returned by EventBus.get_metrics().

    `state` is live: reading it later reflects later emissions.
    """

    def __init__(
        self,
        state: ReactiveState,
        events: Callable[[], list[str]],
        total_listeners: Callable[[], int],
        aggregates: dict[str, Computed],
    ) -> None:
        self._state = ReadOnlyView(state)
        self._events = events
        self._total_listeners = total_listeners
        self._aggregates = aggregates

    @property
    def state(self) -> ReadOnlyView:
        return self._state

    @property
    def aggregates(self) -> dict[str, Computed]:
        return dict(self._aggregates)

    def events(self) -> list[str]:
        return self._events()

    def total_listeners(self) -> int:
        return self._total_listeners()

    def to_dict(self) -> dict[str, Any]:
        """Detached snapshot of counters and aggregates."""
        data = self._state.to_dict()
        data["events"] = self.events()
        data["total_listeners"] = self.total_listeners()
        for name, value in self._aggregates.items():
            data[name] = value.value
        return data
