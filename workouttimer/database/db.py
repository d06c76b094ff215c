"""Database connection and session management."""

from pathlib import Path
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from .models import Base, WorkoutRecord
from ..workout import SAMPLE_WORKOUTS

# ── paths ────────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "WorkoutTimer"
DB_PATH = APP_SUPPORT_DIR / "workouts.db"

# ── engine & session factory (created lazily) ─────────────────────────────

_engine = None
_SessionFactory = None


def _get_engine():
    global _engine
    if _engine is None:
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = create_engine(
            f"sqlite:///{DB_PATH}",
            connect_args={"check_same_thread": False},
            echo=False,
        )
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Override the database connection URL.  Used by tests to point at
    an in-memory SQLite database instead of the real one on disk."""
    global _engine, _SessionFactory
    _SessionFactory = None
    _engine = create_engine(
        url,
        connect_args={"check_same_thread": False},
        echo=False,
    )


def init_db(seed: bool = True) -> None:
    """Create all tables and, on first launch, add the sample workouts."""
    engine = _get_engine()
    Base.metadata.create_all(engine)

    if not seed:
        return
    factory = _get_session_factory()
    with factory() as session:
        if session.query(WorkoutRecord).count() == 0:
            for position, plan in enumerate(SAMPLE_WORKOUTS):
                session.add(WorkoutRecord(
                    id=plan.id,
                    name=plan.name,
                    work_time=plan.work_time,
                    rest_time=plan.rest_time,
                    exercises=list(plan.exercises),
                    position=position,
                ))
            session.commit()


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    factory = _get_session_factory()
    session: OrmSession = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
