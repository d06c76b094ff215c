"""WorkoutTimer — interval training timer."""

__version__ = "0.1.0"
