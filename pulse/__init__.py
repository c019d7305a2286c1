"""
Pulse — In-process reactive event bus
========================================
Events are heard in the order they were subscribed.
A failing listener is counted, never propagated.
"""

from pulse.events import (
    BusConfig,
    BusDestroyedError,
    BusMetrics,
    EventBus,
    EventBusError,
    EventStream,
    EventTimeoutError,
    InvalidConfigError,
    InvalidListenerError,
    InvalidMiddlewareError,
    ListenerRuntimeError,
    MiddlewareRuntimeError,
)
from pulse.reactive import ReactiveState, batch, computed

__all__ = [
    "EventBus",
    "BusConfig",
    "BusMetrics",
    "EventStream",
    "EventBusError",
    "InvalidConfigError",
    "InvalidListenerError",
    "InvalidMiddlewareError",
    "ListenerRuntimeError",
    "MiddlewareRuntimeError",
    "EventTimeoutError",
    "BusDestroyedError",
    "ReactiveState",
    "batch",
    "computed",
]
