"""Interval timer state machine for WorkoutTimer.

Phases
------
READY      Not started — waiting for the user.
WARMUP     Fixed 5 s lead-in before the first work interval.
WORK       Work interval of the current round.
REST       Rest interval between rounds.
COMPLETE   All rounds done.

Transitions
-----------
READY | COMPLETE → WARMUP          (start)
WARMUP → WORK (round 1)            (time up)
WORK → REST                        (time up, round < total)
WORK → COMPLETE                    (time up, final round — no trailing rest)
REST → WORK (round + 1)            (time up)
Any → READY                        (reset)

Timing
------
Remaining time is always computed from the absolute timestamp at which
the phase began, never from accumulated ticks.  The 100 ms tick only
refreshes the display value and notices that a phase has run out; a
missed or late tick (background suspension, dropped frames) delays
nothing beyond the next tick that does arrive.

Pausing snapshots the remaining time; resuming moves the phase start
timestamp so the arithmetic continues where it left off.  Invalid
controls (pause while not running, resume while not paused, …) are
silent no-ops so that a UI racing tap events never errors.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..clock import Clock, SystemClock
from ..cues.scheduler import CueKind, CueScheduler
from ..workout import (
    DEFAULT_REST_TIME,
    DEFAULT_ROUNDS,
    DEFAULT_WORK_TIME,
    WorkoutPlan,
    clamp_interval,
    clamp_rounds,
    planned_duration,
)


# ── enums ─────────────────────────────────────────────────────────────────


class Phase(Enum):
    READY = "ready"
    WARMUP = "warmup"
    WORK = "work"
    REST = "rest"
    COMPLETE = "complete"

    @property
    def display_text(self) -> str:
        return _DISPLAY_TEXT[self]


_DISPLAY_TEXT: dict[Phase, str] = {
    Phase.READY: "Ready",
    Phase.WARMUP: "Get Ready",
    Phase.WORK: "Work",
    Phase.REST: "Rest",
    Phase.COMPLETE: "Done!",
}


# ── constants ─────────────────────────────────────────────────────────────

WARMUP_SECONDS = 5.0
TICK_INTERVAL_MS = 100


def format_clock(seconds: float) -> str:
    """``M:SS`` with the seconds rounded up, so a phase shows "0:05" at
    its start and reaches "0:00" only when it ends."""
    total = max(0, math.ceil(seconds))
    return f"{total // 60}:{total % 60:02d}"


# ── session record ────────────────────────────────────────────────────────


@dataclass
class TimerSession:
    """Everything the state machine knows about the session in progress."""

    phase: Phase = Phase.READY
    round: int = 1
    is_running: bool = False
    is_paused: bool = False
    phase_started_at: float | None = None
    phase_duration: float = 0.0
    paused_remaining: float = 0.0
    display_remaining: float = 0.0
    # cues still unheard when the phase was paused
    pending_countdown: tuple[int, ...] = ()
    entry_cue_pending: bool = False
    end_cue_pending: bool = False


# ── timer ─────────────────────────────────────────────────────────────────


class IntervalTimer(QObject):
    """Work/rest interval timer driven by absolute timestamps.

    Signals
    -------
    ticked(remaining_seconds: float)
        Emitted on every effective ``tick()``.
    countdown_tick(seconds_left: int)
        Relayed from the cue scheduler's 3-2-1 countdown.
    phase_changed(new_phase: Phase)
        Emitted when the phase changes (start, transitions, reset).
    workout_completed()
        Emitted once when the final work interval ends.
    timer_started() / timer_stopped()
        Bracket a session; consumed by the audio session owner.
    """

    ticked = pyqtSignal(float)
    countdown_tick = pyqtSignal(int)
    phase_changed = pyqtSignal(object)
    workout_completed = pyqtSignal()
    timer_started = pyqtSignal()
    timer_stopped = pyqtSignal()

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: Clock | None = None,
        cues: CueScheduler | None = None,
        drive_ticks: bool = True,
    ) -> None:
        super().__init__(parent)

        self._clock: Clock = clock or SystemClock()
        self._cues: CueScheduler = cues if cues is not None else CueScheduler()
        self._cues.add_countdown_handler(self.countdown_tick.emit)

        # ── configuration ─────────────────────────────────────────────
        self._work_time: int = DEFAULT_WORK_TIME
        self._rest_time: int = DEFAULT_REST_TIME
        self._rounds: int = DEFAULT_ROUNDS
        self._workout: WorkoutPlan | None = None

        # ── session state ─────────────────────────────────────────────
        self._session = TimerSession()

        # ── Qt tick ───────────────────────────────────────────────────
        self._qt_timer: QTimer | None = None
        if drive_ticks:
            self._qt_timer = QTimer(self)
            self._qt_timer.setInterval(TICK_INTERVAL_MS)
            self._qt_timer.timeout.connect(self.tick)

    # ══════════════════════════════════════════════════════════════════
    #  CONFIGURATION
    # ══════════════════════════════════════════════════════════════════

    def set_work_time(self, seconds: int) -> None:
        self._work_time = clamp_interval(seconds)

    def set_rest_time(self, seconds: int) -> None:
        self._rest_time = clamp_interval(seconds)

    def set_rounds(self, rounds: int) -> None:
        self._rounds = clamp_rounds(rounds)

    def select_workout(self, plan: WorkoutPlan | None) -> None:
        """Use *plan* for the next session, or quick-timer mode for None."""
        self._workout = plan

    @property
    def workout(self) -> WorkoutPlan | None:
        return self._workout

    @property
    def work_time(self) -> int:
        return self._workout.work_time if self._workout else self._work_time

    @property
    def rest_time(self) -> int:
        return self._workout.rest_time if self._workout else self._rest_time

    @property
    def total_rounds(self) -> int:
        if self._workout is not None:
            return max(1, self._workout.total_rounds)
        return self._rounds

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def phase(self) -> Phase:
        return self._session.phase

    @property
    def current_round(self) -> int:
        return self._session.round

    @property
    def is_running(self) -> bool:
        return self._session.is_running

    @property
    def is_paused(self) -> bool:
        return self._session.is_paused

    @property
    def cues(self) -> CueScheduler:
        return self._cues

    def snapshot(self) -> TimerSession:
        """A copy of the current session state."""
        return replace(self._session)

    def time_remaining(self) -> float:
        """Seconds left in the current phase, from the wall clock."""
        s = self._session
        if s.is_paused:
            return s.paused_remaining
        if s.phase_started_at is None:
            return max(0.0, s.phase_duration)
        elapsed = self._clock.now() - s.phase_started_at
        return max(0.0, s.phase_duration - elapsed)

    @property
    def display_remaining(self) -> float:
        """Remaining time as of the last tick (what the UI shows)."""
        return self._session.display_remaining

    @property
    def formatted_time_remaining(self) -> str:
        return format_clock(self._session.display_remaining)

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the current phase."""
        duration = self._session.phase_duration
        if duration <= 0:
            return 0.0
        elapsed = duration - self._session.display_remaining
        return max(0.0, min(1.0, elapsed / duration))

    @property
    def current_exercise_name(self) -> str | None:
        if self._workout is None:
            return None
        return self._workout.exercise_name(self._session.round)

    @property
    def next_exercise_name(self) -> str | None:
        if self._workout is None:
            return None
        return self._workout.next_exercise_name(self._session.round)

    @property
    def round_info_text(self) -> str:
        phase = self._session.phase
        if phase == Phase.READY:
            return f"{self.total_rounds} rounds"
        if phase == Phase.WARMUP:
            return "Starting soon..."
        if phase == Phase.COMPLETE:
            return "Workout complete"
        return f"{self._session.round}/{self.total_rounds}"

    @property
    def total_duration(self) -> int:
        """Planned seconds of work and rest (warmup excluded)."""
        return planned_duration(self.work_time, self.rest_time, self.total_rounds)

    @property
    def formatted_total_duration(self) -> str:
        minutes, seconds = divmod(self.total_duration, 60)
        if seconds == 0:
            return f"{minutes} min"
        return f"{minutes}:{seconds:02d}"

    @property
    def formatted_total_duration_timer(self) -> str:
        return format_clock(self.total_duration)

    @property
    def button_text(self) -> str:
        if self._session.phase == Phase.COMPLETE:
            return "Start"
        if self._session.is_paused:
            return "Resume"
        if self._session.is_running:
            return "Pause"
        return "Start"

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start_or_toggle(self) -> None:
        """The single big button: start, pause, resume or restart."""
        s = self._session
        if s.phase == Phase.COMPLETE:
            self.reset()
            self.start()
        elif s.is_paused:
            self.resume()
        elif s.is_running:
            self.pause()
        else:
            self.start()

    def start(self) -> None:
        """Begin a session with the warmup.  Valid from READY or COMPLETE."""
        if self._session.phase not in (Phase.READY, Phase.COMPLETE):
            return
        self._session = TimerSession(round=1, is_running=True)
        self._enter_phase(Phase.WARMUP, WARMUP_SECONDS)
        self.timer_started.emit()
        if self._qt_timer is not None:
            self._qt_timer.start()

    def pause(self) -> None:
        """Freeze the countdown.  Cues are cancelled before returning."""
        s = self._session
        if not s.is_running or s.is_paused:
            return
        s.paused_remaining = self.time_remaining()
        s.display_remaining = s.paused_remaining
        s.is_paused = True
        s.is_running = False
        pending = self._cues.pending_cues
        s.pending_countdown = tuple(
            c.seconds_left for c in pending if c.kind is CueKind.COUNTDOWN
        )
        s.entry_cue_pending = any(
            c.kind is CueKind.TRANSITION and not c.at_phase_end for c in pending
        )
        s.end_cue_pending = self._cues.transition_pending
        self._cues.cancel_all()
        if self._qt_timer is not None:
            self._qt_timer.stop()

    def resume(self) -> None:
        """Continue from the paused snapshot, re-arming cues for the rest.

        Only cues that had not fired before the pause are armed again:
        a phase whose end cue already went out is not announced twice.
        """
        s = self._session
        if not s.is_paused:
            return
        s.phase_started_at = self._clock.now() - (
            s.phase_duration - s.paused_remaining
        )
        s.is_paused = False
        s.is_running = True
        self._cues.arm(
            s.phase,
            s.paused_remaining,
            self._upcoming_phase() if s.end_cue_pending else None,
            countdown=s.pending_countdown,
            play_transition_at_start=s.entry_cue_pending,
        )
        if self._qt_timer is not None:
            self._qt_timer.start()

    def reset(self) -> None:
        """Stop everything and return to READY."""
        if self._qt_timer is not None:
            self._qt_timer.stop()
        self._cues.cancel_all()
        changed = self._session.phase != Phase.READY
        self._session = TimerSession()
        if changed:
            self.phase_changed.emit(Phase.READY)
        self.timer_stopped.emit()

    def tick(self) -> None:
        """Refresh the display value and advance the phase when time is up."""
        s = self._session
        if not s.is_running or s.is_paused:
            return

        remaining = self.time_remaining()
        s.display_remaining = remaining
        self.ticked.emit(remaining)

        if remaining <= 0:
            self._transition_to_next_phase()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _upcoming_phase(self) -> Phase | None:
        """What the end of the current phase leads to."""
        s = self._session
        if s.phase == Phase.WARMUP:
            return Phase.WORK
        if s.phase == Phase.WORK:
            return Phase.REST if s.round < self.total_rounds else Phase.COMPLETE
        if s.phase == Phase.REST:
            return Phase.WORK if s.round < self.total_rounds else Phase.COMPLETE
        return None

    def _enter_phase(self, phase: Phase, duration: float, announce: bool = False) -> None:
        s = self._session
        s.phase = phase
        s.phase_duration = float(duration)
        s.phase_started_at = self._clock.now()
        s.display_remaining = s.phase_duration
        # Cues for the new phase are in place before its first tick.
        self._cues.arm(
            phase,
            duration,
            self._upcoming_phase(),
            play_transition_at_start=announce,
        )
        self.phase_changed.emit(phase)

    def _transition_to_next_phase(self) -> None:
        s = self._session
        # The tick beat the scheduler's own end-of-phase cue: announce the
        # new phase from here instead.
        announce = self._cues.transition_pending
        upcoming = self._upcoming_phase()

        if upcoming == Phase.WORK:
            if s.phase == Phase.REST:
                s.round += 1
            self._enter_phase(Phase.WORK, self.work_time, announce)
        elif upcoming == Phase.REST:
            self._enter_phase(Phase.REST, self.rest_time, announce)
        elif upcoming == Phase.COMPLETE:
            self._finish(announce)

    def _finish(self, announce: bool) -> None:
        if self._qt_timer is not None:
            self._qt_timer.stop()
        self._cues.cancel_all()
        if announce:
            self._cues.announce(Phase.COMPLETE)
        s = self._session
        s.phase = Phase.COMPLETE
        s.is_running = False
        s.is_paused = False
        s.phase_started_at = None
        s.phase_duration = 0.0
        s.display_remaining = 0.0
        self.phase_changed.emit(Phase.COMPLETE)
        self.workout_completed.emit()
        self.timer_stopped.emit()
