from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Optional

from algorithms.math_tools import MathTools
from models import (
    ProgressionSuggestion,
    Rationale,
    RecordKind,
    Workout,
    WorkoutExercise,
    WorkoutSet,
)
from record_index import RecordIndex
from settings_schema import AnalyticsSettings


@dataclass
class SessionPerformance:
    """How one exercise went in one workout."""

    workout: Workout
    entry: WorkoutExercise
    working: list[WorkoutSet] = field(default_factory=list)
    completed_count: int = 0
    planned_count: int = 0
    primary_weight: Optional[float] = None
    primary_reps: int = 0
    min_reps: int = 0
    target_met: bool = False

    @classmethod
    def from_entry(cls, workout: Workout, entry: WorkoutExercise) -> "SessionPerformance":
        bodyweight = entry.exercise.is_bodyweight
        completed = entry.completed_sets
        working = [
            s
            for s in completed
            if (s.reps or 0) > 0 and (bodyweight or (s.weight or 0) > 0)
        ]
        perf = cls(
            workout=workout,
            entry=entry,
            working=working,
            completed_count=len(completed),
            planned_count=len(entry.sets),
        )
        if working:
            if bodyweight:
                primary = max(working, key=lambda s: s.reps)
                perf.primary_weight = None
            else:
                primary = max(working, key=lambda s: (s.weight, s.reps))
                perf.primary_weight = float(primary.weight)
            perf.primary_reps = int(primary.reps)
            perf.min_reps = min(int(s.reps) for s in working)
        all_done = bool(entry.sets) and len(working) == len(entry.sets)
        if entry.target_reps is not None:
            all_done = all_done and all(s.reps >= entry.target_reps for s in working)
        perf.target_met = all_done
        return perf

    @property
    def bodyweight(self) -> bool:
        return self.entry.exercise.is_bodyweight

    def regressed_from(self, previous: "SessionPerformance") -> bool:
        """Fewer completed sets, or fewer reps at the same weight."""
        if self.completed_count < previous.completed_count:
            return True
        if self.working and previous.working:
            return (
                self.primary_weight == previous.primary_weight
                and self.primary_reps < previous.primary_reps
            )
        return False

    def keeps_pace_with(self, previous: "SessionPerformance") -> bool:
        if not previous.working:
            return True
        for s in self.working:
            if s.reps >= previous.min_reps:
                continue
            if (
                previous.primary_weight is not None
                and s.weight
                and s.weight > previous.primary_weight
            ):
                continue
            return False
        return True


class ProgressionAdvisor:
    """Recommend the next target for an exercise from its recent sessions."""

    def __init__(self, settings: AnalyticsSettings | None = None) -> None:
        self.settings = settings or AnalyticsSettings()

    def recent_performances(
        self, workouts: Iterable[Workout], exercise_id: str
    ) -> list[SessionPerformance]:
        """Last ``history_sessions`` counted sessions with the exercise, oldest first."""
        sessions = []
        for workout in workouts:
            if not workout.is_counted:
                continue
            entry = workout.find_exercise(exercise_id)
            if entry is not None:
                sessions.append((workout, entry))
        sessions.sort(key=lambda item: (item[0].started_at, item[0].id))
        window = sessions[-self.settings.history_sessions :]
        return [SessionPerformance.from_entry(w, e) for w, e in window]

    def suggest(
        self,
        workouts: list[Workout],
        exercise_id: str,
        records: RecordIndex | None = None,
    ) -> ProgressionSuggestion | None:
        window = self.recent_performances(workouts, exercise_id)
        if not window:
            return None
        if window[-1].entry.exercise.is_cardio:
            return None
        reference = next((p for p in reversed(window) if p.working), None)
        if reference is None:
            return None

        latest = window[-1]
        previous = window[-2] if len(window) >= 2 else None
        latest_regressed = previous is not None and latest.regressed_from(previous)
        earlier_regressed = len(window) >= 3 and window[-2].regressed_from(window[-3])

        if latest_regressed and earlier_regressed:
            rationale = Rationale.DELOAD
            weight, reps = self._deload_target(reference)
        elif latest_regressed:
            rationale = Rationale.HOLD
            weight, reps = reference.primary_weight, reference.primary_reps
        elif (
            latest.working
            and latest.target_met
            and (previous is None or latest.keeps_pace_with(previous))
        ):
            rationale = Rationale.INCREASE
            weight, reps = self._increase_target(latest)
        else:
            rationale = Rationale.HOLD
            weight, reps = reference.primary_weight, reference.primary_reps

        if records is None:
            records = RecordIndex.build(workouts)
        return ProgressionSuggestion(
            exercise_id=exercise_id,
            rationale=rationale,
            suggested_weight=weight,
            suggested_reps=reps,
            suggested_sets=max(reference.planned_count, reference.completed_count),
            current_weight=reference.primary_weight,
            current_reps=reference.primary_reps,
            current_sets=reference.completed_count,
            reasoning=self._reasoning(rationale, weight, reps),
            targets_record=self._targets_record(records, exercise_id, weight, reps),
        )

    def _increase_target(self, perf: SessionPerformance) -> tuple[Optional[float], int]:
        if perf.bodyweight:
            step = 1 if perf.primary_reps < 5 else 2
            return None, perf.primary_reps + step
        current = perf.primary_weight
        rounding = self.settings.weight_rounding
        heavier = MathTools.round_to_increment(
            current * (1 + self.settings.weight_increment_pct / 100), rounding
        )
        if heavier <= current:
            heavier = MathTools.round_to_increment(current + rounding, rounding)
        reps = perf.entry.target_reps or perf.primary_reps
        return heavier, reps

    def _deload_target(self, perf: SessionPerformance) -> tuple[Optional[float], int]:
        if perf.bodyweight:
            step = 1 if perf.primary_reps < 5 else 2
            return None, max(1, perf.primary_reps - step)
        lighter = MathTools.round_to_increment(
            perf.primary_weight * (1 - self.settings.deload_pct / 100),
            self.settings.weight_rounding,
        )
        return lighter, perf.primary_reps

    @staticmethod
    def _targets_record(
        records: RecordIndex, exercise_id: str, weight: Optional[float], reps: int
    ) -> bool:
        if weight is None:
            best = records.best(exercise_id, RecordKind.REPS)
            return best is None or reps > best.value
        est = MathTools.estimated_one_rep_max(weight, reps)
        if est is None:
            return False
        best = records.best(exercise_id, RecordKind.ONE_RM)
        return best is None or est > best.value

    def _reasoning(self, rationale: Rationale, weight: Optional[float], reps: int) -> str:
        target = f"{reps} reps" if weight is None else f"{weight:g} {self.settings.weight_unit} for {reps} reps"
        if rationale == Rationale.INCREASE:
            return f"All sets done, try {target} next time"
        if rationale == Rationale.DELOAD:
            return f"Two sessions in a row went backwards, deload to {target}"
        return f"Repeat {target} until every set is completed"
