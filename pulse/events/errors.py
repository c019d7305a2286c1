"""
Pulse Event Bus — Errors
===========================
Error types for registration, dispatch and waiting.

Registration errors raise synchronously.
Runtime errors (listener, middleware) are recovered locally
and only ever reach error handlers and logs.
Waiting errors surface through the awaited future.
"""

from typing import Any, Callable


def _callable_name(fn: Any) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)


class EventBusError(Exception):
    """Base error for Event Bus operations."""
    pass


class InvalidConfigError(EventBusError, ValueError):
    """Bus configuration value is not acceptable."""
    pass


class InvalidListenerError(EventBusError, TypeError):
    """Listener passed to on/once is not callable."""

    def __init__(self, event: str, listener: Any):
        self.event = event
        self.listener = listener
        super().__init__(
            f"The listener for event '{event}' must be callable, "
            f"got {type(listener).__name__}."
        )


class InvalidMiddlewareError(EventBusError, TypeError):
    """Middleware passed to use() is not callable."""

    def __init__(self, event: str, middleware: Any):
        self.event = event
        self.middleware = middleware
        super().__init__(
            f"Middleware for '{event}' must be callable, "
            f"got {type(middleware).__name__}."
        )


class ListenerRuntimeError(EventBusError):
    """A listener raised while handling an emission."""

    def __init__(self, event: str, listener: Callable, cause: BaseException):
        self.event = event
        self.listener = listener
        self.cause = cause
        super().__init__(
            f"Error in listener '{_callable_name(listener)}' "
            f"for '{event}': {cause}"
        )


class MiddlewareRuntimeError(EventBusError):
    """A middleware raised while transforming a payload."""

    def __init__(self, event: str, middleware: Callable, cause: BaseException):
        self.event = event
        self.middleware = middleware
        self.cause = cause
        super().__init__(
            f"Error in middleware '{_callable_name(middleware)}' "
            f"for '{event}': {cause}"
        )


class EventTimeoutError(EventBusError, TimeoutError):
    """wait_for() deadline passed before the event was emitted."""

    def __init__(self, event: str, timeout: float):
        self.event = event
        self.timeout = timeout
        super().__init__(f"Timeout waiting for event: {event}")


class BusDestroyedError(EventBusError):
    """The bus was destroyed while a wait_for() was pending."""

    def __init__(self, event: str):
        self.event = event
        super().__init__(
            f"Event bus destroyed while waiting for event: {event}"
        )
