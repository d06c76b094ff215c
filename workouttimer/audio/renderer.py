"""Real-time cue renderer.

``CueRenderer.render(frames)`` is called by the audio output whenever
it needs more samples.  It picks up the pending request from the
:class:`CueMailbox`, copies the pre-synthesised sound into a reusable
output buffer (repeating it with a gap when asked) and pads the rest
with silence.  Between cues it renders silence, which keeps the output
stream and the platform audio session alive in the background.
"""

from __future__ import annotations

import numpy as np

from .mailbox import CueMailbox, CueRequest


SAMPLE_RATE = 44100


class CueRenderer:
    def __init__(
        self,
        sounds: dict[str, np.ndarray],
        mailbox: CueMailbox | None = None,
        *,
        sample_rate: int = SAMPLE_RATE,
    ) -> None:
        self._sounds = {
            name: np.asarray(samples, dtype=np.float32)
            for name, samples in sounds.items()
        }
        self.mailbox = mailbox or CueMailbox()
        self.sample_rate = sample_rate
        self.volume: float = 1.0  # 0.0–1.0
        self.muted: bool = False

        self._out = np.zeros(4096, dtype=np.float32)
        self._current: np.ndarray | None = None
        self._pos = 0
        self._repeats_left = 0
        self._gap_left = 0
        self._gap_samples = 0

    @property
    def sound_names(self) -> tuple[str, ...]:
        return tuple(self._sounds)

    @property
    def is_playing(self) -> bool:
        return self._current is not None

    def render(self, frames: int) -> np.ndarray:
        """Return *frames* mono float samples in -1..1.

        The returned array is a view of an internal buffer that is
        overwritten on the next call.
        """
        if frames > len(self._out):
            self._out = np.zeros(frames, dtype=np.float32)
        out = self._out[:frames]
        out.fill(0.0)

        request = self.mailbox.take()
        if request is not None:
            self._begin(request)

        i = 0
        while i < frames and self._current is not None:
            if self._gap_left > 0:
                n = min(self._gap_left, frames - i)
                self._gap_left -= n
                i += n
                continue
            current = self._current
            n = min(len(current) - self._pos, frames - i)
            out[i:i + n] = current[self._pos:self._pos + n]
            self._pos += n
            i += n
            if self._pos >= len(current):
                if self._repeats_left > 0:
                    self._repeats_left -= 1
                    self._pos = 0
                    self._gap_left = self._gap_samples
                else:
                    self._current = None

        if self.muted:
            out.fill(0.0)
        elif self.volume != 1.0:
            out *= self.volume
        return out

    def render_pcm16(self, frames: int) -> bytes:
        """Little-endian 16-bit PCM bytes for *frames* samples."""
        samples = np.clip(self.render(frames), -1.0, 1.0)
        return (samples * 32767).astype("<i2").tobytes()

    def _begin(self, request: CueRequest) -> None:
        samples = self._sounds.get(request.sound)
        if samples is None or request.times <= 0:
            return
        self._current = samples
        self._pos = 0
        self._repeats_left = request.times - 1
        self._gap_left = 0
        # gap is start-to-start; the sound itself fills part of it
        self._gap_samples = max(
            0, int(request.gap * self.sample_rate) - len(samples),
        )
