"""
Pulse Reactive — Batch Transactions
======================================
Thread-local write transaction for reactive records.

While a batch is open:
- writes are applied immediately (reads see them)
- change notifications are deferred
- each changed record notifies its observers ONCE at commit

Batches nest. Only the outermost batch commits.
"""

from __future__ import annotations

import threading
from typing import Any, Dict

_batch_state = threading.local()


def _depth() -> int:
    return getattr(_batch_state, "depth", 0)


def _pending() -> Dict[int, Any]:
    pending = getattr(_batch_state, "pending", None)
    if pending is None:
        pending = {}
        _batch_state.pending = pending
    return pending


def is_batching() -> bool:
    """Check if a batch is currently open on this thread."""
    return _depth() > 0


def mark_changed(state: Any) -> None:
    """
    Record that `state` changed.

    Notifies immediately outside a batch; otherwise defers
    the notification to the outermost commit.
    """
    if _depth() == 0:
        state.notify()
        return
    _pending().setdefault(id(state), state)


class Batch:
    """
    Context manager that coalesces reactive notifications.

    Usage:
        with batch():
            state.total += 1
            state.last = "saved"
        # observers of `state` were notified exactly once
    """

    def __enter__(self):
        _batch_state.depth = _depth() + 1
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        depth = _depth() - 1
        _batch_state.depth = depth
        if depth == 0:
            pending = _pending()
            _batch_state.pending = {}
            for state in pending.values():
                state.notify()
        return False


def batch() -> Batch:
    return Batch()
