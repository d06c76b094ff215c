"""Workout plans and configuration limits.

A plan is an immutable value: a name, work/rest seconds and an ordered
list of exercise names.  One round is run per exercise.  When no plan
is selected the timer runs in "quick timer" mode from standalone
work/rest/round settings instead.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field


# ── limits ────────────────────────────────────────────────────────────────

MIN_INTERVAL_SECONDS = 5
MAX_INTERVAL_SECONDS = 300
MIN_ROUNDS = 1
MAX_ROUNDS = 50

DEFAULT_WORK_TIME = 45
DEFAULT_REST_TIME = 15
DEFAULT_ROUNDS = 8


def clamp_interval(seconds: int) -> int:
    """Clamp a work/rest duration into 5–300 s."""
    return max(MIN_INTERVAL_SECONDS, min(int(seconds), MAX_INTERVAL_SECONDS))


def clamp_rounds(rounds: int) -> int:
    """Clamp a quick-timer round count into 1–50."""
    return max(MIN_ROUNDS, min(int(rounds), MAX_ROUNDS))


def planned_duration(work_time: int, rest_time: int, rounds: int) -> int:
    """Total seconds of work and rest, with no rest after the final round."""
    if rounds <= 0:
        return 0
    return work_time * rounds + rest_time * (rounds - 1)


# ── plan ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class WorkoutPlan:
    name: str
    work_time: int = DEFAULT_WORK_TIME
    rest_time: int = DEFAULT_REST_TIME
    exercises: tuple[str, ...] = ()
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        object.__setattr__(self, "work_time", clamp_interval(self.work_time))
        object.__setattr__(self, "rest_time", clamp_interval(self.rest_time))
        object.__setattr__(self, "exercises", tuple(self.exercises))

    @property
    def total_rounds(self) -> int:
        return len(self.exercises)

    @property
    def total_duration(self) -> int:
        return planned_duration(self.work_time, self.rest_time, self.total_rounds)

    def exercise_name(self, round_number: int) -> str | None:
        """Exercise for a 1-indexed round, or None when out of range."""
        if 1 <= round_number <= len(self.exercises):
            return self.exercises[round_number - 1]
        return None

    def next_exercise_name(self, round_number: int) -> str | None:
        """Exercise for the round after *round_number*, if there is one."""
        if 1 <= round_number < len(self.exercises):
            return self.exercises[round_number]
        return None


SAMPLE_WORKOUTS: tuple[WorkoutPlan, ...] = (
    WorkoutPlan(
        name="Upper Body",
        work_time=45,
        rest_time=15,
        exercises=(
            "Push-ups",
            "Pull-ups",
            "Dips",
            "Diamond Push-ups",
            "Chin-ups",
            "Pike Push-ups",
            "Inverted Rows",
            "Archer Push-ups",
        ),
    ),
    WorkoutPlan(
        name="Core Blast",
        work_time=30,
        rest_time=10,
        exercises=(
            "Plank",
            "Mountain Climbers",
            "Russian Twists",
            "Bicycle Crunches",
            "Leg Raises",
            "Dead Bug",
        ),
    ),
)
