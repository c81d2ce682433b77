import requests
from typing import Optional

from models import Workout


class ProgressClient:
    """Simple REST client for the progress API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 10) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, path: str, **params):
        resp = requests.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def save_workout(self, workout: Workout) -> list[dict]:
        """Upload a workout and return the new personal records it set."""
        resp = requests.post(
            f"{self.base_url}/workouts",
            json=workout.model_dump(mode="json"),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()["new_records"]

    def list_workouts(self) -> list[Workout]:
        return [Workout.model_validate(w) for w in self._get("/workouts")]

    def records(self, exercise_id: Optional[str] = None) -> list[dict]:
        if exercise_id is None:
            return self._get("/records")
        return self._get("/records", exercise_id=exercise_id)

    def pending_records(self) -> list[dict]:
        return self._get("/records/pending")

    def acknowledge_records(self) -> None:
        resp = requests.post(f"{self.base_url}/records/acknowledge", timeout=self.timeout)
        resp.raise_for_status()

    def stats(self) -> dict:
        return self._get("/stats")

    def suggestion(self, exercise_id: str) -> Optional[dict]:
        resp = requests.get(f"{self.base_url}/suggestions/{exercise_id}", timeout=self.timeout)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()
