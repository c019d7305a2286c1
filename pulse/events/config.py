"""
Pulse Event Bus — Configuration
==================================
Construction options for an EventBus.

Options:
- enable_metrics: register computed metric aggregates
- error_handler:  sink for listener failures (error, event, listener)
                  when absent, failures are logged on "pulse.events"
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from pulse.events.errors import InvalidConfigError

ErrorHandler = Callable[[BaseException, str, Callable[..., Any]], None]


@dataclass(frozen=True)
class BusConfig:
    """Immutable EventBus options, validated at construction."""

    enable_metrics: bool = False
    error_handler: Optional[ErrorHandler] = None

    def __post_init__(self):
        if not isinstance(self.enable_metrics, bool):
            raise InvalidConfigError(
                f"enable_metrics must be a bool, "
                f"got {type(self.enable_metrics).__name__}."
            )

        if self.error_handler is not None and not callable(self.error_handler):
            raise InvalidConfigError(
                f"error_handler must be callable, "
                f"got {type(self.error_handler).__name__}."
            )

    def to_dict(self) -> dict:
        return {
            "enable_metrics": self.enable_metrics,
            "error_handler": getattr(self.error_handler, "__qualname__", None),
        }
