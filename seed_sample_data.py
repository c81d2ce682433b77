import logging
import time
from typing import Iterable, Optional

from db import WorkoutRepository
from models import Exercise, Workout, WorkoutExercise, WorkoutSet

logger = logging.getLogger(__name__)

DAY = 24 * 60 * 60

SQUAT = Exercise(id="squat", name="Back Squat", muscle_groups=["quads", "glutes"])
BENCH = Exercise(id="bench", name="Bench Press", muscle_groups=["chest", "triceps"])
PULL_UP = Exercise(id="pull-up", name="Pull-Up", is_bodyweight=True, muscle_groups=["lats"])
RUN = Exercise(id="run", name="Treadmill Run", category="cardio")


def strength_sets(
    weight: Optional[float], reps: Iterable[int], completed: bool = True
) -> list[WorkoutSet]:
    return [WorkoutSet(weight=weight, reps=r, completed=completed) for r in reps]


def make_workout(
    workout_id: str,
    started_at: float,
    entries: list[tuple[Exercise, list[WorkoutSet]]],
    *,
    duration_minutes: float = 60,
    completed: bool = True,
    finished: bool = True,
    target_reps: Optional[int] = None,
) -> Workout:
    return Workout(
        id=workout_id,
        name=f"Session {workout_id}",
        started_at=started_at,
        finished_at=started_at + duration_minutes * 60 if finished else None,
        completed=completed,
        exercises=[
            WorkoutExercise(
                exercise=exercise, sets=sets, order_index=i, target_reps=target_reps
            )
            for i, (exercise, sets) in enumerate(entries)
        ],
    )


def sample_history(now: Optional[float] = None) -> list[Workout]:
    """Four weeks of linear progression on squat and bench, plus pull-ups and a run."""
    now = time.time() if now is None else now
    history = []
    for week in range(4):
        start = now - (28 - week * 7) * DAY
        history.append(
            make_workout(
                f"demo-{week + 1}",
                start,
                [
                    (SQUAT, strength_sets(100 + week * 2.5, [5, 5, 5])),
                    (BENCH, strength_sets(70 + week * 2.5, [5, 5, 5])),
                    (PULL_UP, strength_sets(None, [6 + week, 6 + week, 5 + week])),
                    (RUN, [WorkoutSet(completed=True, duration_seconds=900 + week * 60, distance_km=2.5 + week * 0.25)]),
                ],
                duration_minutes=55 + week,
            )
        )
    return history


def seed(db_path: str = "workout.db") -> int:
    repo = WorkoutRepository(db_path)
    if repo.load_workout_history():
        logger.info("database %s already contains workouts", db_path)
        return 0
    history = sample_history()
    for workout in history:
        repo.save_workout(workout)
    logger.info("seeded %d workouts into %s", len(history), db_path)
    return len(history)


if __name__ == "__main__":
    from logging_config import setup_logging

    setup_logging()
    seed()
