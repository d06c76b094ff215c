"""Wires the interval timer to sound, haptics and saved settings.

The timer and the cue scheduler know nothing about speakers or motors.
``WorkoutController`` subscribes the feedback collaborators to them:

countdown cue            → countdown beep + light pulse
transition cue: WORK     → phase sound ×2 + medium pulse
transition cue: REST     → rest sound ×2 + medium pulse
transition cue: COMPLETE → completion sound ×2 + celebration pulse
timer_started / stopped  → open / close the audio output

A session can end before its completion cue reaches the sound manager
(the tick noticed the end first and the cue is still in its sync
delay).  Closing the output then waits for that cue.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from PyQt6.QtCore import QObject

from .audio.sounds import SoundManager
from .clock import Clock
from .cues.scheduler import CueKind, CueScheduler
from .haptics import HapticFeedback, NullHaptics
from .settings import Settings, save_settings
from .storage import get_workout
from .timer.engine import IntervalTimer, Phase
from .workout import WorkoutPlan


logger = logging.getLogger(__name__)


class WorkoutController(QObject):
    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings: Settings | None = None,
        clock: Clock | None = None,
        cues: CueScheduler | None = None,
        sound: SoundManager | None = None,
        haptics: HapticFeedback | None = None,
        drive_ticks: bool = True,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or Settings()
        self._cues = cues if cues is not None else CueScheduler()
        self._sound = sound if sound is not None else SoundManager(self)
        self._haptics: HapticFeedback = haptics or NullHaptics()
        self._stop_after_completion = False
        self._timer = IntervalTimer(
            self, clock=clock, cues=self._cues, drive_ticks=drive_ticks,
        )

        self._cues.add_countdown_handler(self._on_countdown)
        self._cues.add_transition_handler(self._on_transition)
        self._timer.timer_started.connect(self._sound.start_background_audio)
        self._timer.timer_stopped.connect(self._on_timer_stopped)

        self.apply_settings(self._settings)

    # ── accessors ─────────────────────────────────────────────────────

    @property
    def timer(self) -> IntervalTimer:
        return self._timer

    @property
    def sound(self) -> SoundManager:
        return self._sound

    @property
    def settings(self) -> Settings:
        return self._settings

    # ── configuration ─────────────────────────────────────────────────

    def apply_settings(self, settings: Settings) -> None:
        """Push *settings* into the timer and the sound manager."""
        self._settings = settings
        self._timer.set_work_time(settings.quick_work_time)
        self._timer.set_rest_time(settings.quick_rest_time)
        self._timer.set_rounds(settings.quick_rounds)
        self._sound.set_volume(settings.sound_volume)
        self._sound.set_enabled(settings.sound_enabled)

        plan = None
        if settings.selected_workout_id is not None:
            plan = get_workout(settings.selected_workout_id)
            if plan is None:
                logger.info(
                    "Selected workout %s no longer exists; using quick timer",
                    settings.selected_workout_id,
                )
                settings.selected_workout_id = None
        self._timer.select_workout(plan)

    def set_quick_timer(self, work_time: int, rest_time: int, rounds: int) -> None:
        """Update and persist the quick-timer values (clamped)."""
        self._timer.set_work_time(work_time)
        self._timer.set_rest_time(rest_time)
        self._timer.set_rounds(rounds)
        self._settings = replace(
            self._settings,
            quick_work_time=work_time,
            quick_rest_time=rest_time,
            quick_rounds=rounds,
        )
        save_settings(self._settings)

    def select_workout(self, plan: WorkoutPlan | None) -> None:
        """Run *plan* next (None for quick timer) and remember the choice."""
        self._timer.select_workout(plan)
        self._settings.selected_workout_id = plan.id if plan else None
        save_settings(self._settings)

    # ── controls ──────────────────────────────────────────────────────

    def press(self) -> None:
        """The main start/pause/resume button."""
        if self._settings.haptics_enabled:
            self._haptics.button_tap()
        self._timer.start_or_toggle()

    def reset(self) -> None:
        self._timer.reset()

    # ── cue handlers ──────────────────────────────────────────────────

    def _on_countdown(self, seconds_left: int) -> None:
        self._sound.play_countdown_beep()
        if self._settings.haptics_enabled:
            self._haptics.countdown_pulse()

    def _on_transition(self, phase: Phase) -> None:
        if phase == Phase.WORK:
            self._sound.play_phase_transition()
        elif phase == Phase.REST:
            self._sound.play_rest_start()
        elif phase == Phase.COMPLETE:
            self._sound.play_workout_complete()
        else:
            return

        if self._settings.haptics_enabled:
            if phase == Phase.COMPLETE:
                self._haptics.workout_complete()
            else:
                self._haptics.phase_transition()

        if phase == Phase.COMPLETE and self._stop_after_completion:
            self._stop_after_completion = False
            self._sound.stop_background_audio()

    # ── audio session ─────────────────────────────────────────────────

    def _on_timer_stopped(self) -> None:
        if self._completion_cue_pending():
            self._stop_after_completion = True
            return
        self._stop_after_completion = False
        self._sound.stop_background_audio()

    def _completion_cue_pending(self) -> bool:
        return any(
            cue.kind is CueKind.TRANSITION and cue.announces == Phase.COMPLETE
            for cue in self._cues.pending_cues
        )
