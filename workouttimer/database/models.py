"""SQLAlchemy ORM models for WorkoutTimer."""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import DeclarativeBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class WorkoutRecord(Base):
    """One saved workout plan."""

    __tablename__ = "workouts"

    id = Column(String(36), primary_key=True)  # uuid4 string
    name = Column(String(120), nullable=False)
    work_time = Column(Integer, nullable=False, default=45)   # seconds
    rest_time = Column(Integer, nullable=False, default=15)   # seconds
    exercises = Column(JSON, nullable=False, default=list)    # ordered names
    position = Column(Integer, nullable=False, default=0)     # list order
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    def __repr__(self) -> str:
        return (
            f"<WorkoutRecord name={self.name!r} work={self.work_time} "
            f"rest={self.rest_time} rounds={len(self.exercises or [])}>"
        )
