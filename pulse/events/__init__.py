"""
Pulse Event Bus — Public API
===============================
Named events, middleware, one-shot listeners, streams,
awaitable waits and cross-bus pipes.
"""

from pulse.events.bus import EventBus
from pulse.events.config import BusConfig
from pulse.events.dispatcher import DispatchResult, dispatch
from pulse.events.errors import (
    BusDestroyedError,
    EventBusError,
    EventTimeoutError,
    InvalidConfigError,
    InvalidListenerError,
    InvalidMiddlewareError,
    ListenerRuntimeError,
    MiddlewareRuntimeError,
)
from pulse.events.metrics import BusMetrics
from pulse.events.middleware import WILDCARD, MiddlewareChain
from pulse.events.registry import ListenerRegistry, OnceListener
from pulse.events.stream import EventStream

__all__ = [
    "EventBus",
    "BusConfig",
    "BusMetrics",
    "EventStream",
    "ListenerRegistry",
    "OnceListener",
    "MiddlewareChain",
    "WILDCARD",
    "dispatch",
    "DispatchResult",
    "EventBusError",
    "InvalidConfigError",
    "InvalidListenerError",
    "InvalidMiddlewareError",
    "ListenerRuntimeError",
    "MiddlewareRuntimeError",
    "EventTimeoutError",
    "BusDestroyedError",
]
