"""Single-slot hand-off between the main thread and the audio render side.

The main thread posts the cue it wants heard; the render callback takes
it.  There is exactly one slot: a newer post overwrites an unplayed one,
so a late beep is never played after a newer one.  The render side
never waits on the lock: if the main thread holds it at that instant,
the request is simply picked up on the next buffer.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class CueRequest:
    """Play *sound* *times* times, ``gap`` seconds apart."""

    sound: str
    times: int = 1
    gap: float = 0.2


class CueMailbox:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: CueRequest | None = None

    def post(self, request: CueRequest) -> None:
        """Replace whatever is waiting with *request*.  Main thread only."""
        with self._lock:
            self._pending = request

    def take(self) -> CueRequest | None:
        """Read and clear the slot without blocking.  Render side only."""
        if not self._lock.acquire(blocking=False):
            return None
        try:
            request, self._pending = self._pending, None
        finally:
            self._lock.release()
        return request

    def clear(self) -> None:
        with self._lock:
            self._pending = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None
