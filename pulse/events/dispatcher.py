"""
Pulse Event Bus — Dispatcher
===============================
Delivers one (already transformed) payload to the listeners
of one event.

Dispatch behavior, all inside ONE reactive batch:
1. total_events_emitted += 1, last_emitted_event = event
2. Call persistent listeners in registration order
3. Drain once listeners (live set cleared BEFORE calling them),
   then call the drained snapshot in registration order
4. Commit: metrics observers see one consistent state

Each listener call is isolated:
- the failure is counted in error_count
- routed to the error handler, or logged when there is none
- the next listener still runs

This function NEVER raises because of a listener.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from pulse.events.errors import ListenerRuntimeError
from pulse.events.registry import ListenerRegistry, OnceListener
from pulse.reactive import ReactiveState, batch

logger = logging.getLogger("pulse.events")


# ══════════════════════════════════════════════════════════════
# DISPATCH RESULT
# ══════════════════════════════════════════════════════════════

@dataclass
class DispatchResult:
    """Outcome of delivering one emission."""

    event: str
    had_listeners: bool = False
    listeners_notified: int = 0
    listeners_failed: int = 0
    failures: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event,
            "had_listeners": self.had_listeners,
            "listeners_notified": self.listeners_notified,
            "listeners_failed": self.listeners_failed,
            "failures": list(self.failures),
        }


# ══════════════════════════════════════════════════════════════
# LISTENER INVOCATION
# ══════════════════════════════════════════════════════════════

def _report_failure(
    error: ListenerRuntimeError,
    error_handler: Optional[Callable],
) -> None:
    if error_handler is None:
        logger.error(str(error), exc_info=error.cause)
        return

    try:
        error_handler(error.cause, error.event, error.listener)
    except Exception as exc:
        logger.error(
            f"Error handler failed for '{error.event}': {exc}",
            exc_info=True,
        )


def _call_listeners(
    listeners: Iterable[Callable],
    payload: Any,
    event: str,
    state: ReactiveState,
    result: DispatchResult,
    error_handler: Optional[Callable],
) -> None:
    for listener in listeners:
        original = (
            listener.listener if isinstance(listener, OnceListener) else listener
        )
        name = getattr(original, "__qualname__", str(original))

        try:
            listener(payload)
            result.listeners_notified += 1
            logger.debug(f"Dispatched {event} → {name}")

        except Exception as exc:
            state.error_count += 1
            result.listeners_failed += 1
            result.failures.append({
                "listener": name,
                "error": str(exc),
                "error_type": type(exc).__name__,
            })
            _report_failure(
                ListenerRuntimeError(event, original, exc), error_handler
            )
            # Continue to next listener


# ══════════════════════════════════════════════════════════════
# DISPATCH
# ══════════════════════════════════════════════════════════════

def dispatch(
    event: str,
    payload: Any,
    registry: ListenerRegistry,
    state: ReactiveState,
    error_handler: Optional[Callable] = None,
) -> DispatchResult:
    """
    Deliver `payload` to every listener registered for `event`.

    Args:
        event:         Event name.
        payload:       Payload after the middleware chain.
        registry:      Listener registry to read (and drain).
        state:         Metrics record (total_events_emitted,
                       last_emitted_event, error_count).
        error_handler: Optional sink for listener failures.

    Returns:
        DispatchResult describing the delivery.
    """
    result = DispatchResult(event=event)

    with batch():
        state.total_events_emitted += 1
        state.last_emitted_event = event

        persistent = registry.snapshot(event)
        if persistent:
            result.had_listeners = True
            _call_listeners(
                persistent, payload, event, state, result, error_handler
            )

        drained = registry.drain_once(event)
        if drained:
            result.had_listeners = True
            _call_listeners(
                drained, payload, event, state, result, error_handler
            )

    if not result.had_listeners:
        logger.debug(f"No listeners for event '{event}'")

    return result
