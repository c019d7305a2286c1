"""
Pulse Event Bus — Middleware Chain
=====================================
Ordered payload transformations applied before listeners run.

Chain order for an emission of event E:
1. Wildcard ("*") middleware, in registration order
2. Middleware registered for E, in registration order

Each middleware receives (payload, event, bus):
- returns a value  → that value replaces the payload
- returns None     → payload passes through unchanged
- raises           → logged, payload passes through unchanged,
                     chain continues

One bad middleware can never abort delivery.
"""

import logging
from typing import Any, Callable

from pulse.events.errors import InvalidMiddlewareError, MiddlewareRuntimeError

logger = logging.getLogger("pulse.events")

WILDCARD = "*"

Middleware = Callable[[Any, str, Any], Any]


class MiddlewareChain:
    """Per-event ordered middleware lists plus the wildcard channel."""

    def __init__(self) -> None:
        self._chains: dict[str, list[Middleware]] = {}

    def use(self, event: str, middleware: Middleware) -> Callable[[], None]:
        """
        Append middleware to an event's chain ("*" for every event).

        Returns an unregister callable that removes the first
        matching occurrence, once. Later calls are no-ops.

        Raises:
            InvalidMiddlewareError: middleware is not callable
        """
        if not callable(middleware):
            raise InvalidMiddlewareError(event, middleware)

        self._chains.setdefault(event, []).append(middleware)
        registered = True

        def unregister() -> None:
            nonlocal registered
            if not registered:
                return
            registered = False
            chain = self._chains.get(event)
            if chain is None:
                return
            for index, existing in enumerate(chain):
                if existing is middleware:
                    del chain[index]
                    break
            if not chain:
                del self._chains[event]

        return unregister

    def run(self, event: str, payload: Any, bus: Any = None) -> Any:
        """Run the wildcard chain, then the event chain. Never raises."""
        chain = list(self._chains.get(WILDCARD, ()))
        if event != WILDCARD:
            chain.extend(self._chains.get(event, ()))

        for middleware in chain:
            try:
                result = middleware(payload, event, bus)
            except Exception as exc:
                error = MiddlewareRuntimeError(event, middleware, exc)
                logger.error(str(error), exc_info=True)
                continue
            if result is not None:
                payload = result

        return payload

    def count(self, event: str) -> int:
        return len(self._chains.get(event, ()))

    def clear(self) -> None:
        self._chains.clear()
