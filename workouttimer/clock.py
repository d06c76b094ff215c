"""Time sources.

The timer and the cue scheduler read time only through a clock object
with a single ``now()`` method returning seconds as a float.  Wall-clock
time is used so that remaining time stays correct across process
suspension; tests inject a fake clock instead.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float: ...


class SystemClock:
    """Wall-clock seconds since the epoch."""

    def now(self) -> float:
        return time.time()
