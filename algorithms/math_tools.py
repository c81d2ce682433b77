import math
from typing import Iterable, Optional
import numpy as np

from models import Workout, WorkoutExercise, WorkoutSet


class MathTools:
    """Provides the metric formulas used by the progress analytics."""

    EPLEY_DIVISOR: float = 30.0
    SECONDS_PER_HOUR: float = 3600.0

    @staticmethod
    def clamp(value: float, min_value: float, max_value: float) -> float:
        """Clamp ``value`` to the inclusive range [min_value, max_value]."""
        if min_value > max_value:
            raise ValueError("min_value must not exceed max_value")
        return max(min_value, min(value, max_value))

    @classmethod
    def estimated_one_rep_max(
        cls, weight: Optional[float], reps: Optional[int]
    ) -> Optional[float]:
        """Return the Epley estimate, or ``None`` when inputs are unusable."""
        if weight is None or reps is None or weight <= 0 or reps <= 0:
            return None
        if reps == 1:
            return float(weight)
        return float(weight) * (1 + reps / cls.EPLEY_DIVISOR)

    @staticmethod
    def set_volume(workout_set: WorkoutSet) -> float:
        """Weight times reps, or 0.0 when either is missing."""
        if workout_set.weight is None or workout_set.reps is None:
            return 0.0
        return float(workout_set.weight) * workout_set.reps

    @classmethod
    def exercise_volume(cls, entry: WorkoutExercise) -> float:
        return sum(cls.set_volume(s) for s in entry.sets if s.completed)

    @classmethod
    def session_volume(cls, workout: Workout) -> float:
        """Sum of set volume over every completed set in ``workout``."""
        return sum(cls.exercise_volume(entry) for entry in workout.exercises)

    @classmethod
    def speed_kmh(
        cls, distance_km: Optional[float], duration_seconds: Optional[float]
    ) -> Optional[float]:
        if not distance_km or not duration_seconds:
            return None
        if distance_km <= 0 or duration_seconds <= 0:
            return None
        return distance_km / (duration_seconds / cls.SECONDS_PER_HOUR)

    @staticmethod
    def relative_change(recent: float, previous: float) -> float:
        """Percentage change from ``previous`` to ``recent``; 0.0 without a baseline."""
        if previous <= 0:
            return 0.0
        return (recent - previous) / previous * 100

    @staticmethod
    def round_to_increment(value: float, increment: float) -> float:
        """Round ``value`` to the nearest multiple of ``increment``."""
        if increment <= 0:
            raise ValueError("increment must be positive")
        steps = math.floor(value / increment + 0.5)
        return round(steps * increment, 4)

    @staticmethod
    def mean(values: Iterable[float]) -> float:
        data = list(values)
        if not data:
            return 0.0
        return float(np.mean(np.array(data, dtype=float)))
