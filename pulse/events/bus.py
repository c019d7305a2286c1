"""
Pulse Event Bus — EventBus
=============================
The root entity. Owns the listener registry, the middleware
chain, the metrics record and pending waits.

Emission flow:
    emit → middleware chain → dispatch (one batch) → listeners

Facets built on the same primitives:
- stream():   reactive cell fed by a persistent listener
- wait_for(): awaitable fed by a once listener + loop timer
- pipe():     persistent listener that re-emits on another bus

Every subscribe-like operation returns an explicit capability
(unsubscribe / unregister / unpipe). Nothing is released by
garbage collection.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from pulse.events.config import BusConfig, ErrorHandler
from pulse.events.dispatcher import DispatchResult, dispatch as dispatch_event
from pulse.events.errors import (
    BusDestroyedError,
    EventTimeoutError,
    InvalidConfigError,
)
from pulse.events.metrics import BusMetrics, build_aggregates, new_metrics_state
from pulse.events.middleware import Middleware, MiddlewareChain
from pulse.events.registry import Listener, ListenerRegistry
from pulse.events.stream import EventStream
from pulse.reactive import Computed, ReactiveState

logger = logging.getLogger("pulse.events")


class EventBus:
    """
    In-process publish/subscribe dispatcher.

    Usage:
        bus = EventBus(error_handler=report)
        unsubscribe = bus.on("order.placed", handle_order)
        bus.use("*", stamp_timestamp)
        bus.emit("order.placed", {"id": 7})
    """

    def __init__(
        self,
        config: Optional[BusConfig] = None,
        *,
        enable_metrics: bool = False,
        error_handler: Optional[ErrorHandler] = None,
    ) -> None:
        if config is None:
            config = BusConfig(
                enable_metrics=enable_metrics,
                error_handler=error_handler,
            )
        elif enable_metrics or error_handler is not None:
            raise InvalidConfigError(
                "Pass either a BusConfig or keyword options, not both."
            )

        self._config = config
        self._state: ReactiveState = new_metrics_state()
        self._registry = ListenerRegistry(on_change=self._sync_active_listeners)
        self._middleware = MiddlewareChain()
        self._aggregates: dict[str, Computed] = {}
        self._pending_waits: dict[asyncio.Future, tuple[str, Callable[[], None]]] = {}

        if config.enable_metrics:
            self._aggregates.update(build_aggregates(self._state))

    @property
    def config(self) -> BusConfig:
        return self._config

    def _sync_active_listeners(self) -> None:
        total = self._registry.total()
        if self._state.active_listeners != total:
            self._state.active_listeners = total

    # ══════════════════════════════════════════════════════════
    # SUBSCRIPTION
    # ══════════════════════════════════════════════════════════

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        """
        Subscribe a listener to every emission of `event`.

        Returns an unsubscribe callable.

        Raises:
            InvalidListenerError: listener is not callable
        """
        return self._registry.add(event, listener)

    def once(self, event: str, listener: Listener) -> Callable[[], None]:
        """
        Subscribe a listener to the next emission of `event` only.

        Returns an unsubscribe callable.

        Raises:
            InvalidListenerError: listener is not callable
        """
        return self._registry.add(event, listener, once=True)

    def off(self, event: str, listener: Listener) -> None:
        """Remove a listener (persistent and once). No-op if absent."""
        self._registry.remove(event, listener)

    def remove_all_listeners(self, event: Optional[str] = None) -> None:
        self._registry.remove_all(event)

    # ══════════════════════════════════════════════════════════
    # EMISSION
    # ══════════════════════════════════════════════════════════

    def use(self, event: str, middleware: Middleware) -> Callable[[], None]:
        """
        Add middleware for `event`, or for every event with "*".

        Returns an unregister callable.

        Raises:
            InvalidMiddlewareError: middleware is not callable
        """
        return self._middleware.use(event, middleware)

    def emit(self, event: str, payload: Any = None) -> bool:
        """
        Emit `payload` on `event`.

        Returns True if at least one listener was called.
        Never raises because of a listener or middleware.
        """
        return self.dispatch(event, payload).had_listeners

    def dispatch(self, event: str, payload: Any = None) -> DispatchResult:
        """emit() that returns the full DispatchResult."""
        processed = self._middleware.run(event, payload, self)
        return dispatch_event(
            event,
            processed,
            self._registry,
            self._state,
            self._config.error_handler,
        )

    # ══════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════

    def listener_count(self, event: str) -> int:
        return self._registry.count(event)

    def has_listeners(self, event: str) -> bool:
        return self._registry.has(event)

    def event_names(self) -> list[str]:
        return self._registry.names()

    # ══════════════════════════════════════════════════════════
    # FACETS
    # ══════════════════════════════════════════════════════════

    def stream(self, event: str) -> EventStream:
        return EventStream(self, event)

    def get_metrics(self) -> BusMetrics:
        return BusMetrics(
            self._state,
            events=self.event_names,
            total_listeners=self._registry.total,
            aggregates=self._aggregates,
        )

    def observe(self, callback: Callable[[ReactiveState], Any]) -> Callable[[], None]:
        """
        Observe the metrics record.

        The callback runs once per committed change: once per
        emit, once per subscription change outside an emit.
        """
        return self._state.subscribe(callback)

    def wait_for(
        self, event: str, timeout: Optional[float] = None
    ) -> asyncio.Future:
        """
        Return a future resolved with the next payload of `event`.

        Args:
            event:   Event name.
            timeout: Seconds before the future fails with
                     EventTimeoutError. None waits indefinitely.

        Must be called while an event loop is running.
        The once listener and the timer disarm each other;
        cancelling the future disarms both.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        timer: Optional[asyncio.TimerHandle] = None

        def disarm() -> None:
            self._pending_waits.pop(future, None)
            if timer is not None:
                timer.cancel()
            unsubscribe()

        def on_event(payload: Any) -> None:
            disarm()
            if not future.done():
                future.set_result(payload)

        def on_timeout() -> None:
            disarm()
            if not future.done():
                logger.debug(f"wait_for('{event}') timed out after {timeout}s")
                future.set_exception(EventTimeoutError(event, timeout))

        def on_done(done: asyncio.Future) -> None:
            if done.cancelled():
                disarm()

        unsubscribe = self.once(event, on_event)
        if timeout is not None:
            timer = loop.call_later(timeout, on_timeout)
        self._pending_waits[future] = (event, disarm)
        future.add_done_callback(on_done)
        return future

    def pipe(
        self,
        from_event: str,
        target: "EventBus",
        to_event: Optional[str] = None,
    ) -> Callable[[], None]:
        """
        Forward every emission of `from_event` to `target`.

        The payload is re-emitted unchanged as `to_event`
        (defaults to `from_event`) and passes through the
        target's middleware. Returns an unpipe callable.
        """
        target_event = to_event if to_event is not None else from_event

        def forward(payload: Any) -> None:
            target.emit(target_event, payload)

        logger.info(f"Pipe created: {from_event} → {target_event}")
        return self.on(from_event, forward)

    # ══════════════════════════════════════════════════════════
    # LIFECYCLE
    # ══════════════════════════════════════════════════════════

    def destroy(self) -> None:
        """
        Clear every listener, middleware and aggregate, and fail
        pending waits with BusDestroyedError.

        Counters are kept. The bus stays usable for queries.
        """
        self.remove_all_listeners()
        self._middleware.clear()
        self._aggregates.clear()

        pending = list(self._pending_waits.items())
        self._pending_waits.clear()
        for future, (event, disarm) in pending:
            disarm()
            if not future.done():
                future.set_exception(BusDestroyedError(event))

        logger.info(
            f"Event bus destroyed ({len(pending)} pending waits rejected)"
        )

    def __repr__(self) -> str:
        return (
            f"EventBus(events={len(self.event_names())}, "
            f"listeners={self._registry.total()})"
        )
