from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import Literal, Optional

from pydantic import BaseModel, Field


class Exercise(BaseModel):
    """Catalog entry referenced by a logged exercise."""

    id: str
    name: str
    category: Literal["strength", "cardio"] = "strength"
    is_bodyweight: bool = False
    muscle_groups: list[str] = Field(default_factory=list)

    @property
    def is_cardio(self) -> bool:
        return self.category == "cardio"


class WorkoutSet(BaseModel):
    """One recorded effort. Every numeric field is optional."""

    weight: Optional[float] = Field(default=None, ge=0)
    reps: Optional[int] = Field(default=None, ge=0)
    completed: bool = False
    duration_seconds: Optional[float] = Field(default=None, ge=0)
    distance_km: Optional[float] = Field(default=None, ge=0)
    rest_seconds: Optional[float] = Field(default=None, ge=0)

    @property
    def has_strength_data(self) -> bool:
        """True when both weight and reps are present and positive."""
        return bool(self.weight and self.weight > 0 and self.reps and self.reps > 0)


class WorkoutExercise(BaseModel):
    exercise: Exercise
    sets: list[WorkoutSet] = Field(default_factory=list)
    order_index: int = 0
    target_reps: Optional[int] = Field(default=None, ge=1)
    notes: Optional[str] = None

    @property
    def completed_sets(self) -> list[WorkoutSet]:
        return [s for s in self.sets if s.completed]


class Workout(BaseModel):
    """A training session as stored by the persistence layer."""

    id: str
    name: str = ""
    started_at: float
    finished_at: Optional[float] = None
    completed: bool = False
    exercises: list[WorkoutExercise] = Field(default_factory=list)
    notes: Optional[str] = None

    @property
    def is_counted(self) -> bool:
        """Only finished and completed workouts feed the analytics."""
        return self.completed and self.finished_at is not None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return self.finished_at - self.started_at

    def exercise_ids(self) -> list[str]:
        """Distinct exercise ids in logged order."""
        return list(dict.fromkeys(entry.exercise.id for entry in self.exercises))

    def find_exercise(self, exercise_id: str) -> Optional[WorkoutExercise]:
        """All entries for ``exercise_id`` merged into one, sets in logged order."""
        entries = [e for e in self.exercises if e.exercise.id == exercise_id]
        if not entries:
            return None
        if len(entries) == 1:
            return entries[0]
        return entries[0].model_copy(
            update={
                "sets": [s for e in entries for s in e.sets],
                "target_reps": next(
                    (e.target_reps for e in entries if e.target_reps is not None), None
                ),
            }
        )


class RecordKind(str, enum.Enum):
    WEIGHT = "weight"
    ONE_RM = "1rm"
    VOLUME = "volume"
    REPS = "reps"
    DURATION = "duration"
    DISTANCE = "distance"
    SPEED = "speed"


class Rationale(str, enum.Enum):
    INCREASE = "increase"
    HOLD = "hold"
    DELOAD = "deload"


@dataclass(frozen=True)
class PersonalRecord:
    exercise_id: str
    exercise_name: str
    kind: RecordKind
    value: float
    workout_id: str
    achieved_at: float
    set_index: Optional[int] = None
    weight: Optional[float] = None
    reps: Optional[int] = None
    duration_seconds: Optional[float] = None
    distance_km: Optional[float] = None
    is_new: bool = False


@dataclass(frozen=True)
class ProgressionSuggestion:
    exercise_id: str
    rationale: Rationale
    suggested_weight: Optional[float]
    suggested_reps: int
    suggested_sets: int
    current_weight: Optional[float]
    current_reps: int
    current_sets: int
    reasoning: str
    targets_record: bool = False


@dataclass(frozen=True)
class ProgressStats:
    recent_workouts: int = 0
    volume_change: float = 0.0
    avg_duration: float = 0.0
    recent_volume: float = 0.0
    previous_volume: float = 0.0
    window_days: int = 30
