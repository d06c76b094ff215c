"""Audio package."""

from .mailbox import CueMailbox, CueRequest
from .renderer import CueRenderer, SAMPLE_RATE
from .sounds import SoundManager, SOUND_NAMES, synthesize_sounds

__all__ = [
    "CueMailbox",
    "CueRequest",
    "CueRenderer",
    "SAMPLE_RATE",
    "SoundManager",
    "SOUND_NAMES",
    "synthesize_sounds",
]
