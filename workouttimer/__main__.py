"""Allow running WorkoutTimer as a module: python -m workouttimer."""

from __future__ import annotations

import argparse
import logging
import signal
import sys

from PyQt6.QtCore import QCoreApplication, QTimer

from .controller import WorkoutController
from .database.db import init_db
from .haptics import LoggingHaptics
from .settings import load_settings
from .storage import load_workouts
from .timer.engine import Phase


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="workouttimer", description="Interval training timer")
    parser.add_argument("--work", type=int, help="work seconds (5-300)")
    parser.add_argument("--rest", type=int, help="rest seconds (5-300)")
    parser.add_argument("--rounds", type=int, help="rounds (1-50)")
    parser.add_argument("--workout", help="run a saved workout by name")
    parser.add_argument("--list", action="store_true", help="list saved workouts and exit")
    parser.add_argument("--mute", action="store_true", help="no sound")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()

    workouts = load_workouts()
    if args.list:
        for plan in workouts:
            print(f"{plan.name}: {plan.total_rounds} rounds, "
                  f"{plan.work_time}s work / {plan.rest_time}s rest")
        return 0

    settings = load_settings()
    settings.selected_workout_id = None
    if args.mute:
        settings.sound_enabled = False

    app = QCoreApplication(sys.argv[:1])
    app.setApplicationName("WorkoutTimer")

    controller = WorkoutController(settings=settings, haptics=LoggingHaptics())
    timer = controller.timer
    if args.work is not None:
        timer.set_work_time(args.work)
    if args.rest is not None:
        timer.set_rest_time(args.rest)
    if args.rounds is not None:
        timer.set_rounds(args.rounds)
    if args.workout:
        plan = next((w for w in workouts if w.name == args.workout), None)
        if plan is None:
            print(f"No workout named {args.workout!r}", file=sys.stderr)
            return 2
        timer.select_workout(plan)

    def on_phase(phase: Phase) -> None:
        line = phase.display_text
        if phase in (Phase.WORK, Phase.REST):
            line += f"  {timer.round_info_text}  {timer.formatted_time_remaining}"
            if phase == Phase.WORK and timer.current_exercise_name:
                line += f"  {timer.current_exercise_name}"
            elif phase == Phase.REST and timer.next_exercise_name:
                line += f"  next: {timer.next_exercise_name}"
        print(line, flush=True)

    timer.phase_changed.connect(on_phase)
    # Quit once the completion cue has played and the output is closed.
    controller.sound.output_stopped.connect(app.quit)
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    # Qt blocks Python signal handlers; wake the interpreter periodically.
    wake = QTimer()
    wake.timeout.connect(lambda: None)
    wake.start(250)

    print(f"{timer.total_rounds} rounds, {timer.formatted_total_duration}", flush=True)
    timer.start()
    code = app.exec()
    timer.reset()
    return code


if __name__ == "__main__":
    sys.exit(main())
