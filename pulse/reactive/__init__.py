"""
Pulse Reactive — Public API
==============================
Observable records, batch transactions and computed values.
The event bus keeps its metrics and stream cells here.
"""

from pulse.reactive.batching import Batch, batch, is_batching
from pulse.reactive.computed import Computed, computed
from pulse.reactive.state import ReactiveState, ReadOnlyView

__all__ = [
    "Batch",
    "batch",
    "is_batching",
    "Computed",
    "computed",
    "ReactiveState",
    "ReadOnlyView",
]
