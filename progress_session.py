from __future__ import annotations
import logging
from typing import Iterable, Optional

from models import PersonalRecord, ProgressionSuggestion, ProgressStats, Workout
from progress_aggregator import ProgressAggregator
from progression_advisor import ProgressionAdvisor
from record_index import RecordIndex, detect_new_prs
from settings_schema import AnalyticsSettings

logger = logging.getLogger(__name__)


class ProgressSession:
    """Owns the derived progress state for one user's workout history.

    Every method runs to completion on the caller's thread and performs no
    I/O. Calls must not overlap: ``update`` is not reentrant, so a single
    owner (the REST layer or the CLI) serializes access.
    """

    def __init__(self, settings: AnalyticsSettings | None = None) -> None:
        self.settings = settings or AnalyticsSettings()
        self.advisor = ProgressionAdvisor(self.settings)
        self.aggregator = ProgressAggregator(self.settings)
        self._records = RecordIndex()
        self._suggestions: dict[str, ProgressionSuggestion] = {}
        self._pending: list[PersonalRecord] = []
        self._stats = ProgressStats(window_days=self.settings.recent_days)

    @property
    def record_index(self) -> RecordIndex:
        return self._records

    @property
    def personal_records(self) -> list[PersonalRecord]:
        return self._records.all_records()

    @property
    def progress_stats(self) -> ProgressStats:
        return self._stats

    @property
    def pending_prs(self) -> tuple[PersonalRecord, ...]:
        return tuple(self._pending)

    @property
    def suggestions(self) -> dict[str, ProgressionSuggestion]:
        return dict(self._suggestions)

    def recent_exercise_ids(self, workouts: Iterable[Workout]) -> list[str]:
        """Exercises trained in the last ``recent_sessions`` counted workouts."""
        counted = sorted(
            (w for w in workouts if w.is_counted),
            key=lambda w: (w.started_at, w.id),
            reverse=True,
        )
        seen: dict[str, None] = {}
        for workout in counted[: self.settings.recent_sessions]:
            for entry in workout.exercises:
                seen.setdefault(entry.exercise.id, None)
        return list(seen)

    def update(self, workouts: Iterable[Workout], now: Optional[float] = None) -> None:
        """Rebuild records, stats and the suggestion cache from ``workouts``."""
        snapshot = list(workouts)
        records = RecordIndex.build(snapshot)
        stats = self.aggregator.summarize(snapshot, now=now)
        suggestions: dict[str, ProgressionSuggestion] = {}
        for exercise_id in self.recent_exercise_ids(snapshot):
            suggestion = self.advisor.suggest(snapshot, exercise_id, records=records)
            if suggestion is not None:
                suggestions[exercise_id] = suggestion
        self._records = records
        self._stats = stats
        self._suggestions = suggestions
        logger.debug(
            "progress rebuilt: %d workouts, %d records, %d suggestions",
            len(snapshot),
            len(records),
            len(suggestions),
        )

    def suggestion_for(self, exercise_id: str) -> ProgressionSuggestion | None:
        return self._suggestions.get(exercise_id)

    def record_completion(
        self, completed_workout: Workout, previous_workouts: Iterable[Workout]
    ) -> list[PersonalRecord]:
        new_records = detect_new_prs(completed_workout, previous_workouts)
        if new_records:
            logger.info(
                "workout %s set %d new personal records",
                completed_workout.id,
                len(new_records),
            )
        self._pending.extend(new_records)
        return new_records

    def acknowledge_prs(self) -> None:
        self._pending = []
