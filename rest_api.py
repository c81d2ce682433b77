import threading
from typing import List, Optional
from fastapi import FastAPI, HTTPException

from config import load_settings
from db import WorkoutRepository
from logging_config import setup_logging
from models import Workout
from progress_session import ProgressSession


class ProgressAPI:
    """Provides REST endpoints for workout history and progress analytics."""

    def __init__(
        self,
        db_path: str = "workout.db",
        yaml_path: str = "settings.yaml",
    ) -> None:
        self.db_path = db_path
        self.settings = load_settings(yaml_path)
        setup_logging(self.settings.log_level)
        self.workouts = WorkoutRepository(db_path)
        self.progress = ProgressSession(self.settings)
        # FastAPI runs sync endpoints on a thread pool; the session is not reentrant
        self._lock = threading.Lock()
        self.refresh()
        self.app = FastAPI(
            title="Progress API",
            description="REST API for workout history and progress analytics",
        )
        self._setup_routes()

    def refresh(self) -> list[Workout]:
        with self._lock:
            history = self.workouts.load_workout_history()
            self.progress.update(history)
        return history

    def finish_workout(self, workout: Workout) -> list:
        """Store ``workout`` and return the personal records it set.

        Re-posting a workout that is already stored and counted edits it
        without raising its records again.
        """
        with self._lock:
            history = self.workouts.load_workout_history()
            previous = [w for w in history if w.id != workout.id]
            already_counted = any(
                w.id == workout.id and w.is_counted for w in history
            )
            self.workouts.save_workout(workout)
            new_records = []
            if workout.is_counted and not already_counted:
                new_records = self.progress.record_completion(workout, previous)
            self.progress.update(previous + [workout])
        return new_records

    def _setup_routes(self) -> None:
        @self.app.get("/health")
        def health():
            return {"status": "ok"}

        @self.app.get("/workouts")
        def list_workouts() -> List[Workout]:
            return self.workouts.load_workout_history()

        @self.app.post("/workouts")
        def save_workout(workout: Workout):
            new_records = self.finish_workout(workout)
            return {"id": workout.id, "new_records": new_records}

        @self.app.get("/workouts/{workout_id}")
        def get_workout(workout_id: str) -> Workout:
            try:
                return self.workouts.fetch(workout_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @self.app.delete("/workouts/{workout_id}")
        def delete_workout(workout_id: str):
            try:
                self.workouts.delete(workout_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            self.refresh()
            return {"status": "deleted"}

        @self.app.get("/records")
        def records(exercise_id: Optional[str] = None):
            if exercise_id is None:
                return self.progress.personal_records
            return self.progress.record_index.for_exercise(exercise_id)

        @self.app.get("/records/pending")
        def pending_records():
            return list(self.progress.pending_prs)

        @self.app.post("/records/acknowledge")
        def acknowledge_records():
            with self._lock:
                self.progress.acknowledge_prs()
            return {"status": "acknowledged"}

        @self.app.get("/stats")
        def stats():
            return self.progress.progress_stats

        @self.app.get("/suggestions")
        def suggestions():
            return self.progress.suggestions

        @self.app.get("/suggestions/{exercise_id}")
        def suggestion(exercise_id: str):
            found = self.progress.suggestion_for(exercise_id)
            if found is None:
                raise HTTPException(status_code=404, detail="no suggestion for exercise")
            return found


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(ProgressAPI().app)
