"""Timer package."""

from .engine import (
    IntervalTimer,
    TimerSession,
    Phase,
    WARMUP_SECONDS,
    TICK_INTERVAL_MS,
    format_clock,
)

__all__ = [
    "IntervalTimer",
    "TimerSession",
    "Phase",
    "WARMUP_SECONDS",
    "TICK_INTERVAL_MS",
    "format_clock",
]
