"""Haptic feedback port.

Vibration hardware is platform territory; the controller only needs
something with these four methods.  ``NullHaptics`` is used where there
is no motor at all, ``LoggingHaptics`` traces pulses for debugging.
"""

from __future__ import annotations

import logging
from typing import Protocol


logger = logging.getLogger(__name__)


class HapticFeedback(Protocol):
    def countdown_pulse(self) -> None: ...

    def phase_transition(self) -> None: ...

    def workout_complete(self) -> None: ...

    def button_tap(self) -> None: ...


class NullHaptics:
    def countdown_pulse(self) -> None:
        pass

    def phase_transition(self) -> None:
        pass

    def workout_complete(self) -> None:
        pass

    def button_tap(self) -> None:
        pass


class LoggingHaptics:
    def countdown_pulse(self) -> None:
        logger.debug("haptic: light")

    def phase_transition(self) -> None:
        logger.debug("haptic: medium")

    def workout_complete(self) -> None:
        logger.debug("haptic: celebration")

    def button_tap(self) -> None:
        logger.debug("haptic: soft")
