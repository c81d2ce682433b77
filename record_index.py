from __future__ import annotations
import dataclasses
from typing import Iterable, Optional

from algorithms.math_tools import MathTools
from models import PersonalRecord, RecordKind, Workout, WorkoutExercise, WorkoutSet


def _rank(record: PersonalRecord) -> tuple:
    # earlier workouts keep a record on equal value
    return (
        -record.value,
        record.achieved_at,
        record.workout_id,
        -1 if record.set_index is None else record.set_index,
    )


class RecordIndex:
    """Best-ever value of each tracked metric, per exercise."""

    def __init__(
        self, records: dict[str, dict[RecordKind, PersonalRecord]] | None = None
    ) -> None:
        self._records: dict[str, dict[RecordKind, PersonalRecord]] = records or {}

    @classmethod
    def build(cls, workouts: Iterable[Workout]) -> "RecordIndex":
        """Scan every counted workout once and keep the running maxima."""
        index = cls()
        for workout in workouts:
            if not workout.is_counted:
                continue
            # repeated entries of one exercise count as a single session
            for exercise_id in workout.exercise_ids():
                index._observe_exercise(workout, workout.find_exercise(exercise_id))
        return index

    def _observe_exercise(self, workout: Workout, entry: WorkoutExercise) -> None:
        exercise = entry.exercise
        volume = 0.0
        for position, workout_set in enumerate(entry.sets):
            if not workout_set.completed:
                continue
            volume += MathTools.set_volume(workout_set)
            for kind, value in self._set_metrics(entry, workout_set):
                self._offer(
                    PersonalRecord(
                        exercise_id=exercise.id,
                        exercise_name=exercise.name,
                        kind=kind,
                        value=value,
                        workout_id=workout.id,
                        achieved_at=workout.started_at,
                        set_index=position,
                        weight=workout_set.weight,
                        reps=workout_set.reps,
                        duration_seconds=workout_set.duration_seconds,
                        distance_km=workout_set.distance_km,
                    )
                )
        if volume > 0:
            self._offer(
                PersonalRecord(
                    exercise_id=exercise.id,
                    exercise_name=exercise.name,
                    kind=RecordKind.VOLUME,
                    value=volume,
                    workout_id=workout.id,
                    achieved_at=workout.started_at,
                )
            )

    @staticmethod
    def _set_metrics(
        entry: WorkoutExercise, workout_set: WorkoutSet
    ) -> list[tuple[RecordKind, float]]:
        metrics: list[tuple[RecordKind, float]] = []
        if workout_set.has_strength_data:
            metrics.append((RecordKind.WEIGHT, float(workout_set.weight)))
            one_rm = MathTools.estimated_one_rep_max(workout_set.weight, workout_set.reps)
            if one_rm is not None:
                metrics.append((RecordKind.ONE_RM, one_rm))
        reps = workout_set.reps or 0
        if reps > 0 and (entry.exercise.is_bodyweight or not workout_set.weight):
            metrics.append((RecordKind.REPS, float(reps)))
        if workout_set.duration_seconds and workout_set.duration_seconds > 0:
            metrics.append((RecordKind.DURATION, float(workout_set.duration_seconds)))
        if workout_set.distance_km and workout_set.distance_km > 0:
            metrics.append((RecordKind.DISTANCE, float(workout_set.distance_km)))
        speed = MathTools.speed_kmh(workout_set.distance_km, workout_set.duration_seconds)
        if speed is not None:
            metrics.append((RecordKind.SPEED, speed))
        return metrics

    def _offer(self, candidate: PersonalRecord) -> None:
        by_kind = self._records.setdefault(candidate.exercise_id, {})
        current = by_kind.get(candidate.kind)
        if current is None or _rank(candidate) < _rank(current):
            by_kind[candidate.kind] = candidate

    def exercise_ids(self) -> list[str]:
        return sorted(self._records)

    def for_exercise(self, exercise_id: str) -> list[PersonalRecord]:
        by_kind = self._records.get(exercise_id, {})
        return [by_kind[k] for k in RecordKind if k in by_kind]

    def best(self, exercise_id: str, kind: RecordKind) -> Optional[PersonalRecord]:
        return self._records.get(exercise_id, {}).get(kind)

    def all_records(self) -> list[PersonalRecord]:
        """Flat list, most recently achieved first."""
        order = {k: i for i, k in enumerate(RecordKind)}
        records = [r for ex_id in self._records for r in self.for_exercise(ex_id)]
        return sorted(
            records, key=lambda r: (-r.achieved_at, r.exercise_id, order[r.kind])
        )

    def as_dict(self) -> dict[str, list[PersonalRecord]]:
        return {ex_id: self.for_exercise(ex_id) for ex_id in self.exercise_ids()}

    def __len__(self) -> int:
        return sum(len(v) for v in self._records.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecordIndex):
            return NotImplemented
        return self.as_dict() == other.as_dict()


def detect_new_prs(
    completed_workout: Workout, previous_workouts: Iterable[Workout]
) -> list[PersonalRecord]:
    """Return the records ``completed_workout`` strictly improves on."""
    baseline = RecordIndex.build(
        w for w in previous_workouts if w.id != completed_workout.id
    )
    candidates = RecordIndex.build([completed_workout])
    new_records: list[PersonalRecord] = []
    for record in candidates.all_records():
        previous = baseline.best(record.exercise_id, record.kind)
        if previous is None or record.value > previous.value:
            new_records.append(dataclasses.replace(record, is_new=True))
    return new_records
