"""Cue sound synthesis and playback using numpy + QAudioSink.

All sounds are generated programmatically with sine-wave synthesis and
ADSR envelopes, once, at start-up.  Playback goes through a single
pull-mode ``QAudioSink`` whose device asks :class:`CueRenderer` for
samples; the main thread hands cues over through the renderer's
single-slot mailbox.

Sound names
-----------
- ``countdown`` — short beep for the 3-2-1 countdown
- ``phase``     — bright two-tone for entering a work interval
- ``rest``      — soft low tone for entering a rest interval
- ``complete``  — ascending arpeggio for the end of the workout
"""

from __future__ import annotations

import logging

import numpy as np

from PyQt6.QtCore import QIODevice, QObject, pyqtSignal
from PyQt6.QtMultimedia import QAudio, QAudioFormat, QAudioSink, QMediaDevices

from ..cues.scheduler import CueHandle, QtTimerFacility, SchedulingFacility
from .renderer import SAMPLE_RATE, CueRenderer
from .mailbox import CueRequest


logger = logging.getLogger(__name__)


SOUND_NAMES = (
    "countdown",
    "phase",
    "rest",
    "complete",
)

REPEAT_GAP = 0.2  # seconds between repeated plays of one cue

# Ducking is released once the closing cue has played out:
# one sound, the repeats, one more sound, then a short tail.
CUE_SOUND_SECONDS = 0.3
UNDUCK_TAIL = 0.2

# Closing the output waits for the cue in flight, polling at this
# interval, for at most DRAIN_TIMEOUT seconds.
DRAIN_POLL_INTERVAL = 0.05
DRAIN_TIMEOUT = 3.0


# ═══════════════════════════════════════════════════════════════════════════
#  SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _make_envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.ones(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if decay > 0 and d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    s_end = max(length - release, d_end)
    if s_end > d_end:
        env[d_end:s_end] = sustain_level
    if release > 0 and s_end < length:
        env[s_end:] = np.linspace(sustain_level, 0.0, length - s_end)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    """Pure sine wave at *freq* Hz for *duration_s* seconds."""
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_countdown() -> np.ndarray:
    """Countdown — crisp 880 Hz beep, 120 ms."""
    tone = _sine(880.0, 0.12) * 0.5
    env = _make_envelope(len(tone), attack=60, decay=300, sustain_level=0.6, release=1200)
    return tone * env


def _generate_phase() -> np.ndarray:
    """Work start — two quick rising tones (E5 → B5)."""
    parts: list[np.ndarray] = []
    for freq in (659.25, 987.77):
        tone = _sine(freq, 0.09) * 0.55
        env = _make_envelope(len(tone), attack=60, decay=200, sustain_level=0.5, release=600)
        parts.append(tone * env)
    return np.concatenate(parts)


def _generate_rest() -> np.ndarray:
    """Rest start — soft A4 with an octave overtone, slow release."""
    duration = 0.18
    combined = _sine(440.0, duration) * 0.4 + _sine(880.0, duration) * 0.08
    env = _make_envelope(
        len(combined),
        attack=int(SAMPLE_RATE * 0.01),
        decay=int(SAMPLE_RATE * 0.04),
        sustain_level=0.4,
        release=int(SAMPLE_RATE * 0.1),
    )
    return combined * env


def _generate_complete() -> np.ndarray:
    """Workout complete — C5→E5→G5→C6, last note held."""
    notes = [523.25, 659.25, 783.99, 1046.50]
    parts: list[np.ndarray] = []
    for i, freq in enumerate(notes):
        if i == len(notes) - 1:
            tone = _sine(freq, 0.3) * 0.5
            env = _make_envelope(len(tone), attack=80, decay=300, sustain_level=0.5, release=600)
        else:
            tone = _sine(freq, 0.08) * 0.5
            env = _make_envelope(len(tone), attack=60, decay=150, sustain_level=0.3, release=200)
        parts.append(tone * env)
        if i < len(notes) - 1:
            parts.append(np.zeros(int(SAMPLE_RATE * 0.02)))
    return np.concatenate(parts)


_GENERATORS = {
    "countdown": _generate_countdown,
    "phase": _generate_phase,
    "rest": _generate_rest,
    "complete": _generate_complete,
}


def synthesize_sounds() -> dict[str, np.ndarray]:
    """Render every cue sound as float32 samples at ``SAMPLE_RATE``."""
    return {name: gen().astype(np.float32) for name, gen in _GENERATORS.items()}


# ═══════════════════════════════════════════════════════════════════════════
#  OUTPUT DEVICE
# ═══════════════════════════════════════════════════════════════════════════


class _CueStream(QIODevice):
    """Endless read-only PCM stream backed by a :class:`CueRenderer`."""

    def __init__(self, renderer: CueRenderer, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._renderer = renderer

    def isSequential(self) -> bool:
        return True

    def bytesAvailable(self) -> int:
        return 4096 + super().bytesAvailable()

    def readData(self, maxlen: int) -> bytes:
        frames = maxlen // 2
        if frames <= 0:
            return b""
        return self._renderer.render_pcm16(frames)

    def writeData(self, data) -> int:
        return -1


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Plays cue sounds.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.start_background_audio()
        mgr.play("countdown")

    ``play()`` never touches the audio device; it only posts into the
    renderer's mailbox.  When no output device is available the
    manager logs a warning and keeps accepting calls as no-ops.

    Signals
    -------
    ducking_changed(active: bool)
        Other audio should be lowered while *active*.  The first
        countdown beep starts ducking; the phase, rest and completion
        sounds end it once they have played out.
    output_stopped()
        Emitted when ``stop_background_audio()`` has finished, after
        any cue still playing was allowed to complete.
    """

    ducking_changed = pyqtSignal(bool)
    output_stopped = pyqtSignal()

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        renderer: CueRenderer | None = None,
        facility: SchedulingFacility | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._renderer = renderer or CueRenderer(synthesize_sounds())
        self._renderer.volume = self._volume
        self._facility = facility if facility is not None else QtTimerFacility(self)
        self._sink: QAudioSink | None = None
        self._stream: _CueStream | None = None
        self._background_active = False

        self._ducking = False
        self._unduck: CueHandle | None = None
        self._drain: CueHandle | None = None
        self._drain_waited = 0.0

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100)."""
        self._volume = max(0, min(level, 100)) / 100.0
        self._renderer.volume = self._volume

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        self._renderer.muted = not enabled

    def play(self, name: str, times: int = 1) -> None:
        """Queue a sound by name.  No-op if disabled or name unknown."""
        if not self._enabled or times <= 0:
            return
        if name not in self._renderer.sound_names:
            logger.debug("Unknown sound %r", name)
            return
        self._renderer.mailbox.post(CueRequest(name, times, REPEAT_GAP))

    def play_countdown_beep(self) -> None:
        """Countdown beep; starts (or extends) a ducking sequence."""
        if self._enabled:
            self._cancel_unduck()
            self._set_ducking(True)
        self.play("countdown")

    def play_phase_transition(self) -> None:
        self._play_and_end_ducking("phase", times=2)

    def play_rest_start(self) -> None:
        self._play_and_end_ducking("rest", times=2)

    def play_workout_complete(self) -> None:
        self._play_and_end_ducking("complete", times=2)

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def renderer(self) -> CueRenderer:
        return self._renderer

    @property
    def background_active(self) -> bool:
        return self._background_active

    @property
    def ducking(self) -> bool:
        return self._ducking

    @property
    def draining(self) -> bool:
        """True while closing the output waits for a cue to finish."""
        return self._drain is not None

    # ── ducking ───────────────────────────────────────────────────────

    def _play_and_end_ducking(self, name: str, times: int) -> None:
        if not self._enabled:
            return
        self._cancel_unduck()
        self._set_ducking(True)
        self.play(name, times)
        delay = CUE_SOUND_SECONDS + (times - 1) * REPEAT_GAP + CUE_SOUND_SECONDS
        self._unduck = self._facility.schedule(delay + UNDUCK_TAIL, self._end_ducking)

    def _end_ducking(self) -> None:
        self._unduck = None
        self._set_ducking(False)

    def _cancel_unduck(self) -> None:
        if self._unduck is not None:
            self._unduck.cancel()
            self._unduck = None

    def _set_ducking(self, active: bool) -> None:
        if self._ducking == active:
            return
        self._ducking = active
        logger.debug("Ducking %s", "on" if active else "off")
        self.ducking_changed.emit(active)

    # ── audio session ─────────────────────────────────────────────────

    def start_background_audio(self) -> None:
        """Open the output stream; call when a session starts."""
        self._cancel_drain()
        if self._background_active:
            return
        sink = self._ensure_sink()
        if sink is None or self._stream is None:
            return
        sink.start(self._stream)
        if sink.error() != QAudio.Error.NoError:
            logger.warning("Audio output failed to start: %s", sink.error())
            return
        self._background_active = True

    def stop_background_audio(self) -> None:
        """Close the output stream; call when a session stops or completes.

        A cue that is queued or still playing is allowed to finish first.
        """
        self._cancel_drain()
        self._drain_waited = 0.0
        self._stop_when_idle()

    def _stop_when_idle(self) -> None:
        self._drain = None
        if self._background_active and self._cue_in_flight():
            if self._drain_waited < DRAIN_TIMEOUT:
                self._drain_waited += DRAIN_POLL_INTERVAL
                self._drain = self._facility.schedule(
                    DRAIN_POLL_INTERVAL, self._stop_when_idle,
                )
                return
            logger.warning("Cue still playing after %.1fs; closing output", DRAIN_TIMEOUT)

        if self._background_active:
            if self._sink is not None:
                self._sink.stop()
            self._background_active = False
        self.output_stopped.emit()

    def _cue_in_flight(self) -> bool:
        return self._renderer.is_playing or self._renderer.mailbox.has_pending

    def _cancel_drain(self) -> None:
        if self._drain is not None:
            self._drain.cancel()
            self._drain = None

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_sink(self) -> QAudioSink | None:
        if self._sink is not None:
            return self._sink
        device = QMediaDevices.defaultAudioOutput()
        if device.isNull():
            logger.warning("No audio output device; cues will be silent")
            return None

        fmt = QAudioFormat()
        fmt.setSampleRate(self._renderer.sample_rate)
        fmt.setChannelCount(1)
        fmt.setSampleFormat(QAudioFormat.SampleFormat.Int16)
        if not device.isFormatSupported(fmt):
            logger.warning("Audio device %s rejects 16-bit mono", device.description())
            return None

        self._stream = _CueStream(self._renderer, self)
        self._stream.open(QIODevice.OpenModeFlag.ReadOnly)
        self._sink = QAudioSink(device, fmt, self)
        return self._sink
