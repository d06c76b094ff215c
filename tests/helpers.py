"""Shared test helpers for WorkoutTimer."""

from __future__ import annotations

from typing import Callable

from workouttimer.timer.engine import IntervalTimer


class SignalCollector:
    """Utility to capture pyqtSignal emissions (or handler calls) into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Deterministic clock.  Time is kept in whole milliseconds."""

    def __init__(self, start: float = 0.0):
        self._ms = round(start * 1000)

    def now(self) -> float:
        return self._ms / 1000

    def advance(self, seconds: float) -> None:
        self._ms += round(seconds * 1000)

    def set(self, seconds: float) -> None:
        self._ms = round(seconds * 1000)


class FakeHandle:
    def __init__(self, due_ms: int, seq: int, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.seq = seq
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeFacility:
    """Scheduling facility driven by a :class:`FakeClock`.

    Nothing fires on its own: ``advance()`` moves the clock forward and
    runs every callback that comes due, in due order.
    """

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.handles: list[FakeHandle] = []
        self.fail = False
        self._seq = 0

    def schedule(self, delay: float, callback: Callable[[], None]) -> FakeHandle:
        if self.fail:
            raise RuntimeError("timer facility unavailable")
        self._seq += 1
        handle = FakeHandle(
            round((self.clock.now() + delay) * 1000), self._seq, callback,
        )
        self.handles.append(handle)
        return handle

    @property
    def live(self) -> list[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def run_due(self) -> None:
        """Fire everything already due at the current time."""
        self._run_until(round(self.clock.now() * 1000))

    def advance(self, seconds: float) -> None:
        target = round(self.clock.now() * 1000) + round(seconds * 1000)
        self._run_until(target)
        self.clock.set(target / 1000)

    def _run_until(self, target_ms: int) -> None:
        while True:
            due = [h for h in self.live if h.due_ms <= target_ms]
            if not due:
                return
            handle = min(due, key=lambda h: (h.due_ms, h.seq))
            now_ms = round(self.clock.now() * 1000)
            if handle.due_ms > now_ms:
                self.clock.set(handle.due_ms / 1000)
            handle.fired = True
            handle.callback()


def run(timer: IntervalTimer, facility: FakeFacility, seconds: float, step: float = 0.1) -> None:
    """Let *seconds* pass, ticking the timer every *step* like the UI does."""
    steps = round(seconds / step)
    for _ in range(steps):
        facility.advance(step)
        timer.tick()
