"""Countdown and transition cue scheduling.

The scheduler arms one set of cues per phase:

* a countdown cue ``k`` seconds before the phase ends, for each ``k``
  in the countdown set (3-2-1 by default),
* a transition cue at the phase end announcing the upcoming phase,
* optionally, a transition cue right after arming announcing the phase
  just entered.

Cues run on their own single-shot timers, independent of the timer's
100 ms polling tick.  Arming a new set, pausing and resetting all go
through ``cancel_all()``, which bumps a generation counter: any callback
belonging to an older generation is dropped even if the underlying
facility already queued it.

The scheduler only decides *when* handlers run.  What a cue sounds or
feels like is up to the registered handlers (audio, haptics).  Failures
of the scheduling facility or of a handler are logged and swallowed; the
timer state machine stays the source of truth for phase changes.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

from PyQt6.QtCore import QObject, QTimer


logger = logging.getLogger(__name__)


# ── constants ─────────────────────────────────────────────────────────────

COUNTDOWN_SECONDS: tuple[int, ...] = (3, 2, 1)
TRANSITION_SYNC_DELAY = 0.05  # lets the UI catch up before an announcement


class CueKind(Enum):
    COUNTDOWN = "countdown"
    TRANSITION = "transition"


@dataclass(frozen=True)
class ScheduledCue:
    """One pending cue: *offset* seconds after arming."""

    offset: float
    kind: CueKind
    seconds_left: int | None = None
    announces: Any = None
    at_phase_end: bool = False


CountdownHandler = Callable[[int], None]
TransitionHandler = Callable[[Any], None]


# ── scheduling facility ───────────────────────────────────────────────────


class CueHandle(Protocol):
    def cancel(self) -> None: ...


class SchedulingFacility(Protocol):
    def schedule(self, delay: float, callback: Callable[[], None]) -> CueHandle: ...


class _QtHandle:
    def __init__(self, timer: QTimer) -> None:
        self._timer: QTimer | None = timer

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class QtTimerFacility(QObject):
    """Runs each callback from its own single-shot QTimer."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> _QtHandle:
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setInterval(max(0, round(delay * 1000)))
        handle = _QtHandle(timer)

        def fire() -> None:
            handle.cancel()
            callback()

        timer.timeout.connect(fire)
        timer.start()
        return handle


# ── scheduler ─────────────────────────────────────────────────────────────


class CueScheduler:
    """Arms and cancels the cue set of the active phase."""

    def __init__(
        self,
        facility: SchedulingFacility | None = None,
        *,
        countdown: tuple[int, ...] = COUNTDOWN_SECONDS,
    ) -> None:
        self._facility = facility if facility is not None else QtTimerFacility()
        self._countdown = tuple(countdown)
        self._generation = 0
        self._handles: list[CueHandle] = []
        self._pending: list[ScheduledCue] = []
        self._countdown_handlers: list[CountdownHandler] = []
        self._transition_handlers: list[TransitionHandler] = []

    # ── handlers ──────────────────────────────────────────────────────

    def add_countdown_handler(self, handler: CountdownHandler) -> None:
        self._countdown_handlers.append(handler)

    def add_transition_handler(self, handler: TransitionHandler) -> None:
        self._transition_handlers.append(handler)

    # ── state ─────────────────────────────────────────────────────────

    @property
    def pending_cues(self) -> tuple[ScheduledCue, ...]:
        """Cues armed for the active phase that have not fired yet."""
        return tuple(self._pending)

    @property
    def transition_pending(self) -> bool:
        """True while the end-of-phase transition cue is still waiting."""
        return any(cue.at_phase_end for cue in self._pending)

    # ── controls ──────────────────────────────────────────────────────

    def arm(
        self,
        entered: Any,
        duration: float,
        upcoming: Any = None,
        countdown: tuple[int, ...] | None = None,
        play_transition_at_start: bool = False,
    ) -> None:
        """Replace the armed cue set with the cues for a phase of *duration*.

        *entered* is the phase just begun; *upcoming* is announced at the
        end of it (nothing is announced when it is ``None``).
        """
        self.cancel_all()
        duration = max(0.0, float(duration))
        offsets = self._countdown if countdown is None else tuple(countdown)

        if play_transition_at_start:
            self._schedule(ScheduledCue(
                TRANSITION_SYNC_DELAY, CueKind.TRANSITION, announces=entered,
            ))

        # Only the displayed second and below: a resume with 0.4 s left
        # announces "1", not a burst of 3-2-1.
        displayed = math.ceil(duration)
        for k in sorted(set(offsets), reverse=True):
            if 0 < k <= displayed:
                self._schedule(ScheduledCue(
                    max(0.0, duration - k), CueKind.COUNTDOWN, seconds_left=k,
                ))

        if upcoming is not None:
            self._schedule(ScheduledCue(
                duration, CueKind.TRANSITION, announces=upcoming,
                at_phase_end=True,
            ))

    def announce(self, kind: Any) -> None:
        """Fire a single transition cue for *kind* after the sync delay.

        Does not cancel the armed set.
        """
        self._schedule(ScheduledCue(
            TRANSITION_SYNC_DELAY, CueKind.TRANSITION, announces=kind,
        ))

    def cancel_all(self) -> None:
        """Drop every scheduled-but-unfired cue.  Safe when nothing is armed."""
        self._generation += 1
        handles, self._handles = self._handles, []
        self._pending.clear()
        for handle in handles:
            try:
                handle.cancel()
            except Exception:
                logger.exception("Failed to cancel scheduled cue")

    # ── internal ──────────────────────────────────────────────────────

    def _schedule(self, cue: ScheduledCue) -> None:
        generation = self._generation
        self._pending.append(cue)

        def fire() -> None:
            if generation != self._generation:
                return
            if cue in self._pending:
                self._pending.remove(cue)
            self._dispatch(cue)

        try:
            handle = self._facility.schedule(cue.offset, fire)
        except Exception:
            logger.exception(
                "Could not schedule %s cue at +%.2fs", cue.kind.value, cue.offset,
            )
            self._pending.remove(cue)
            return
        self._handles.append(handle)

    def _dispatch(self, cue: ScheduledCue) -> None:
        if cue.kind is CueKind.COUNTDOWN:
            handlers: list[Callable[[Any], None]] = list(self._countdown_handlers)
            arg: Any = cue.seconds_left
        else:
            handlers = list(self._transition_handlers)
            arg = cue.announces
        for handler in handlers:
            try:
                handler(arg)
            except Exception:
                logger.exception("Cue handler %r failed", handler)
