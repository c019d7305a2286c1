"""
Pulse Event Bus — Listener Registry
======================================
Controls which listeners receive which events.

Two sets per event name:
- persistent: called on every emission until removed
- once:       called on the next emission only, then drained

Rules:
- Insertion order is call order
- Membership is by reference identity, never by __eq__/__hash__
  (bound methods match on (instance, function), so
  off(event, obj.method) finds an earlier on(event, obj.method))
- Same callable twice = one slot
- A callable may sit in the persistent AND once set independently
- Once entries are OnceListener wrappers that keep the original callable
- Removing an unknown listener is a no-op
- Empty sets are pruned (names() never reports a silent event)
- In-memory only, thread-safe for mutation
"""

import logging
import types
from threading import Lock
from typing import Any, Callable, Optional

from pulse.events.errors import InvalidListenerError

logger = logging.getLogger("pulse.events")

Listener = Callable[[Any], Any]


def identity_key(listener: Any) -> tuple:
    """
    Identity token for a callable.

    Ids stay valid while the registry holds the callable,
    because a bound method keeps its instance and function alive.
    """
    if isinstance(listener, types.MethodType):
        return ("method", id(listener.__self__), id(listener.__func__))
    if isinstance(listener, types.BuiltinMethodType) and listener.__self__ is not None:
        return ("builtin", id(listener.__self__), listener.__name__)
    return ("object", id(listener))


# ══════════════════════════════════════════════════════════════
# ONCE WRAPPER
# ══════════════════════════════════════════════════════════════

class OnceListener:
    """
    One-shot wrapper around a listener.

    The wrapper has its own identity; `listener` is the
    callable the caller registered, used to match off().
    """

    __slots__ = ("event", "listener")

    def __init__(self, event: str, listener: Listener) -> None:
        self.event = event
        self.listener = listener

    def __call__(self, payload: Any) -> Any:
        return self.listener(payload)

    def matches(self, listener: Any) -> bool:
        return listener is self or identity_key(listener) == identity_key(self.listener)

    def __repr__(self) -> str:
        name = getattr(self.listener, "__qualname__", repr(self.listener))
        return f"OnceListener({self.event!r}, {name})"


# ══════════════════════════════════════════════════════════════
# LISTENER REGISTRY
# ══════════════════════════════════════════════════════════════

class ListenerRegistry:
    """
    In-memory registry of persistent and once listeners.

    Each set maps an identity token to the registered
    callable (persistent) or its OnceListener (once).

    `on_change` is called after every membership change
    (add, remove, remove_all, drain) outside the lock.
    """

    def __init__(self, on_change: Optional[Callable[[], None]] = None):
        self._persistent: dict[str, dict[tuple, Listener]] = {}
        self._once: dict[str, dict[tuple, OnceListener]] = {}
        self._on_change = on_change
        self._lock = Lock()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    # ── Mutation ──────────────────────────────────────────────

    def add(
        self, event: str, listener: Listener, once: bool = False
    ) -> Callable[[], None]:
        """
        Register a listener for an event.

        Returns an unsubscribe callable bound to this exact
        (event, listener, kind) slot.

        Raises:
            InvalidListenerError: listener is not callable
        """
        if not callable(listener):
            raise InvalidListenerError(event, listener)

        key = identity_key(listener)
        with self._lock:
            if once:
                entries = self._once.setdefault(event, {})
                entry = entries.get(key)
                if entry is None:
                    entry = OnceListener(event, listener)
                    entries[key] = entry
            else:
                entries = self._persistent.setdefault(event, {})
                entry = entries.setdefault(key, listener)

        logger.debug(
            f"Listener registered: "
            f"{getattr(listener, '__qualname__', listener)} → {event}"
            f"{' (once)' if once else ''}"
        )
        self._changed()

        def unsubscribe() -> None:
            self._discard(event, key, entry, once=once)

        return unsubscribe

    def _discard(self, event: str, key: tuple, entry: Any, once: bool) -> None:
        """Remove one exact entry from one set. No-op if absent."""
        with self._lock:
            table = self._once if once else self._persistent
            entries = table.get(event)
            if entries is None or entries.get(key) is not entry:
                return
            del entries[key]
            if not entries:
                del table[event]

        self._changed()

    def remove(self, event: str, listener: Listener) -> None:
        """
        Remove a listener from both sets of an event.

        Once entries match either the wrapper itself or the
        callable it wraps. Always succeeds.
        """
        if isinstance(listener, OnceListener):
            key = identity_key(listener.listener)
        else:
            key = identity_key(listener)

        removed = False
        with self._lock:
            persistent = self._persistent.get(event)
            if persistent is not None and persistent.get(key) is not None:
                del persistent[key]
                removed = True
                if not persistent:
                    del self._persistent[event]

            once = self._once.get(event)
            if once is not None and key in once and once[key].matches(listener):
                del once[key]
                removed = True
                if not once:
                    del self._once[event]

        if removed:
            self._changed()

    def remove_all(self, event: Optional[str] = None) -> None:
        """Clear one event's sets, or every set when event is None."""
        with self._lock:
            if event is None:
                self._persistent.clear()
                self._once.clear()
            else:
                self._persistent.pop(event, None)
                self._once.pop(event, None)

        self._changed()

    def drain_once(self, event: str) -> tuple[OnceListener, ...]:
        """
        Snapshot the once set of an event and clear it.

        The live set is emptied BEFORE the caller invokes the
        snapshot, so re-subscription during a callback lands in
        a fresh set and is untouched by the current drain.
        """
        with self._lock:
            entries = self._once.pop(event, None)

        if not entries:
            return ()

        self._changed()
        return tuple(entries.values())

    # ── Queries ───────────────────────────────────────────────

    def snapshot(self, event: str) -> tuple[Listener, ...]:
        """Persistent listeners for an event, in call order."""
        with self._lock:
            return tuple(self._persistent.get(event, {}).values())

    def count(self, event: str) -> int:
        with self._lock:
            return (
                len(self._persistent.get(event, ()))
                + len(self._once.get(event, ()))
            )

    def has(self, event: str) -> bool:
        return self.count(event) > 0

    def names(self) -> list[str]:
        """De-duplicated event names with at least one listener."""
        with self._lock:
            names = dict.fromkeys(self._persistent)
            names.update(dict.fromkeys(self._once))
        return list(names)

    def total(self) -> int:
        """Listener count summed over every event and both sets."""
        with self._lock:
            return (
                sum(len(s) for s in self._persistent.values())
                + sum(len(s) for s in self._once.values())
            )
