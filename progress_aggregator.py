from __future__ import annotations
import time
from typing import Iterable, Optional

from algorithms.math_tools import MathTools
from models import ProgressStats, Workout
from settings_schema import AnalyticsSettings

SECONDS_PER_DAY = 24 * 60 * 60


class ProgressAggregator:
    """Summary statistics over a trailing window of counted workouts."""

    def __init__(self, settings: AnalyticsSettings | None = None) -> None:
        self.settings = settings or AnalyticsSettings()

    def _windows(
        self, workouts: Iterable[Workout], now: float
    ) -> tuple[list[Workout], list[Workout]]:
        """Split counted workouts into the recent window and the one before it."""
        span = self.settings.recent_days * SECONDS_PER_DAY
        recent_start = now - span
        previous_start = recent_start - span
        recent: list[Workout] = []
        previous: list[Workout] = []
        for workout in workouts:
            if not workout.is_counted:
                continue
            if recent_start < workout.started_at <= now:
                recent.append(workout)
            elif previous_start < workout.started_at <= recent_start:
                previous.append(workout)
        return recent, previous

    def summarize(
        self, workouts: Iterable[Workout], now: Optional[float] = None
    ) -> ProgressStats:
        if now is None:
            now = time.time()
        recent, previous = self._windows(workouts, now)
        recent_volume = sum(MathTools.session_volume(w) for w in recent)
        previous_volume = sum(MathTools.session_volume(w) for w in previous)
        durations = [
            w.duration_seconds / 60 for w in recent if w.duration_seconds is not None
        ]
        return ProgressStats(
            recent_workouts=len(recent),
            volume_change=round(MathTools.relative_change(recent_volume, previous_volume), 1),
            avg_duration=round(MathTools.mean(durations), 1),
            recent_volume=round(recent_volume, 2),
            previous_volume=round(previous_volume, 2),
            window_days=self.settings.recent_days,
        )
