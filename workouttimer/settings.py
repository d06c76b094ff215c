"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/WorkoutTimer/settings.json

Usage::

    settings = load_settings()
    settings.quick_rounds = 10
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .workout import (
    DEFAULT_REST_TIME,
    DEFAULT_ROUNDS,
    DEFAULT_WORK_TIME,
    clamp_interval,
    clamp_rounds,
)


logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "WorkoutTimer"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── quick timer ───────────────────────────────────────────────────
    quick_work_time: int = DEFAULT_WORK_TIME    # seconds
    quick_rest_time: int = DEFAULT_REST_TIME    # seconds
    quick_rounds: int = DEFAULT_ROUNDS
    selected_workout_id: str | None = None      # None → quick timer

    # ── feedback ──────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 70                      # 0-100
    haptics_enabled: bool = True

    def __post_init__(self) -> None:
        self.quick_work_time = clamp_interval(self.quick_work_time)
        self.quick_rest_time = clamp_interval(self.quick_rest_time)
        self.quick_rounds = clamp_rounds(self.quick_rounds)
        self.sound_volume = max(0, min(int(self.sound_volume), 100))


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    if not SETTINGS_PATH.exists():
        return Settings()
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
        # Only use keys that exist in the dataclass
        valid_keys = {f.name for f in fields(Settings)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings at %s: %s", SETTINGS_PATH, exc)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
