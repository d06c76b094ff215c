"""Saved workout plans.

Thin layer over the ``workouts`` table that speaks :class:`WorkoutPlan`
values, so nothing above it sees ORM rows.  List order is the
``position`` column.
"""

from __future__ import annotations

from .database.db import get_session
from .database.models import WorkoutRecord
from .workout import WorkoutPlan


def _to_plan(record: WorkoutRecord) -> WorkoutPlan:
    return WorkoutPlan(
        id=record.id,
        name=record.name,
        work_time=record.work_time,
        rest_time=record.rest_time,
        exercises=tuple(record.exercises or ()),
    )


def _apply(record: WorkoutRecord, plan: WorkoutPlan) -> None:
    record.name = plan.name
    record.work_time = plan.work_time
    record.rest_time = plan.rest_time
    record.exercises = list(plan.exercises)


def load_workouts() -> list[WorkoutPlan]:
    """All saved plans in list order."""
    with get_session() as db:
        records = (
            db.query(WorkoutRecord)
            .order_by(WorkoutRecord.position, WorkoutRecord.created_at)
            .all()
        )
        return [_to_plan(r) for r in records]


def get_workout(workout_id: str) -> WorkoutPlan | None:
    with get_session() as db:
        record = db.get(WorkoutRecord, workout_id)
        return _to_plan(record) if record else None


def add_workout(plan: WorkoutPlan) -> None:
    """Append *plan* to the end of the list."""
    with get_session() as db:
        count = db.query(WorkoutRecord).count()
        record = WorkoutRecord(id=plan.id, position=count)
        _apply(record, plan)
        db.add(record)


def update_workout(plan: WorkoutPlan) -> None:
    """Overwrite the saved plan with the same id.  Unknown ids are ignored."""
    with get_session() as db:
        record = db.get(WorkoutRecord, plan.id)
        if record is not None:
            _apply(record, plan)


def delete_workout(workout_id: str) -> None:
    with get_session() as db:
        record = db.get(WorkoutRecord, workout_id)
        if record is None:
            return
        db.delete(record)
        db.flush()
        _renumber(db)


def move_workout(workout_id: str, new_index: int) -> None:
    """Move a plan to *new_index* in the list (clamped to the ends)."""
    with get_session() as db:
        records = (
            db.query(WorkoutRecord)
            .order_by(WorkoutRecord.position, WorkoutRecord.created_at)
            .all()
        )
        moving = next((r for r in records if r.id == workout_id), None)
        if moving is None:
            return
        records.remove(moving)
        new_index = max(0, min(new_index, len(records)))
        records.insert(new_index, moving)
        for position, record in enumerate(records):
            record.position = position


def _renumber(db) -> None:
    records = (
        db.query(WorkoutRecord)
        .order_by(WorkoutRecord.position, WorkoutRecord.created_at)
        .all()
    )
    for position, record in enumerate(records):
        record.position = position
