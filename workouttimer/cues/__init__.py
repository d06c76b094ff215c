"""Cue scheduling package."""

from .scheduler import (
    CueScheduler,
    CueKind,
    ScheduledCue,
    QtTimerFacility,
    COUNTDOWN_SECONDS,
    TRANSITION_SYNC_DELAY,
)

__all__ = [
    "CueScheduler",
    "CueKind",
    "ScheduledCue",
    "QtTimerFacility",
    "COUNTDOWN_SECONDS",
    "TRANSITION_SYNC_DELAY",
]
