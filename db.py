import sqlite3
import json
import logging
from contextlib import contextmanager
from typing import List, Optional, Tuple

from models import Exercise, Workout, WorkoutExercise, WorkoutSet

logger = logging.getLogger(__name__)


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "workouts": (
            """CREATE TABLE workouts (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL DEFAULT '',
                    started_at REAL NOT NULL,
                    finished_at REAL,
                    completed INTEGER NOT NULL DEFAULT 0,
                    notes TEXT
                );""",
            ["id", "name", "started_at", "finished_at", "completed", "notes"],
        ),
        "exercises": (
            """CREATE TABLE exercises (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT 'strength',
                    is_bodyweight INTEGER NOT NULL DEFAULT 0,
                    muscle_groups TEXT NOT NULL DEFAULT '[]'
                );""",
            ["id", "name", "category", "is_bodyweight", "muscle_groups"],
        ),
        "workout_exercises": (
            """CREATE TABLE workout_exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_id TEXT NOT NULL,
                    exercise_id TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    order_index INTEGER NOT NULL DEFAULT 0,
                    target_reps INTEGER,
                    notes TEXT,
                    FOREIGN KEY(workout_id) REFERENCES workouts(id) ON DELETE CASCADE,
                    FOREIGN KEY(exercise_id) REFERENCES exercises(id)
                );""",
            [
                "id",
                "workout_id",
                "exercise_id",
                "position",
                "order_index",
                "target_reps",
                "notes",
            ],
        ),
        "sets": (
            """CREATE TABLE sets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_exercise_id INTEGER NOT NULL,
                    position INTEGER NOT NULL,
                    weight REAL,
                    reps INTEGER,
                    completed INTEGER NOT NULL DEFAULT 0,
                    duration_seconds REAL,
                    distance_km REAL,
                    rest_seconds REAL,
                    FOREIGN KEY(workout_exercise_id) REFERENCES workout_exercises(id) ON DELETE CASCADE
                );""",
            [
                "id",
                "workout_exercise_id",
                "position",
                "weight",
                "reps",
                "completed",
                "duration_seconds",
                "distance_km",
                "rest_seconds",
            ],
        ),
    }

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self._ensure_schema()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        connection.execute("PRAGMA foreign_keys=on;")
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.execute("PRAGMA foreign_keys=off;")
            # keep REFERENCES clauses pointing at the new table during rebuilds
            conn.execute("PRAGMA legacy_alter_table=on;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            conn.execute("PRAGMA foreign_keys=on;")

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)
        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            conn.execute(f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;")
        conn.execute(f"DROP TABLE {table}_old;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def _delete_all(self, table: str) -> None:
        self.execute(f"DELETE FROM {table};")


def _optional_bool(value: Optional[int]) -> bool:
    return bool(value) if value is not None else False


class WorkoutRepository(BaseRepository):
    """Stores complete workouts and loads them back as models."""

    def save_workout(self, workout: Workout) -> None:
        """Insert or replace ``workout`` together with its exercises and sets."""
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO workouts (id, name, started_at, finished_at, completed, notes) "
                "VALUES (?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET name = excluded.name, "
                "started_at = excluded.started_at, finished_at = excluded.finished_at, "
                "completed = excluded.completed, notes = excluded.notes;",
                (
                    workout.id,
                    workout.name,
                    workout.started_at,
                    workout.finished_at,
                    int(workout.completed),
                    workout.notes,
                ),
            )
            conn.execute(
                "DELETE FROM workout_exercises WHERE workout_id = ?;", (workout.id,)
            )
            for position, entry in enumerate(workout.exercises):
                ex = entry.exercise
                conn.execute(
                    "INSERT INTO exercises (id, name, category, is_bodyweight, muscle_groups) "
                    "VALUES (?, ?, ?, ?, ?) "
                    "ON CONFLICT(id) DO UPDATE SET name = excluded.name, "
                    "category = excluded.category, is_bodyweight = excluded.is_bodyweight, "
                    "muscle_groups = excluded.muscle_groups;",
                    (
                        ex.id,
                        ex.name,
                        ex.category,
                        int(ex.is_bodyweight),
                        json.dumps(ex.muscle_groups),
                    ),
                )
                cur = conn.execute(
                    "INSERT INTO workout_exercises (workout_id, exercise_id, position, order_index, target_reps, notes) "
                    "VALUES (?, ?, ?, ?, ?, ?);",
                    (
                        workout.id,
                        ex.id,
                        position,
                        entry.order_index,
                        entry.target_reps,
                        entry.notes,
                    ),
                )
                entry_id = cur.lastrowid
                conn.executemany(
                    "INSERT INTO sets (workout_exercise_id, position, weight, reps, completed, duration_seconds, distance_km, rest_seconds) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?);",
                    [
                        (
                            entry_id,
                            idx,
                            s.weight,
                            s.reps,
                            int(s.completed),
                            s.duration_seconds,
                            s.distance_km,
                            s.rest_seconds,
                        )
                        for idx, s in enumerate(entry.sets)
                    ],
                )
        logger.debug("saved workout %s", workout.id)

    def load_workout_history(self) -> list[Workout]:
        """Return every stored workout, most recently started first."""
        return self._load()

    def fetch(self, workout_id: str) -> Workout:
        found = self._load(workout_id)
        if not found:
            raise ValueError("workout not found")
        return found[0]

    def exists(self, workout_id: str) -> bool:
        rows = self.fetch_all("SELECT 1 FROM workouts WHERE id = ?;", (workout_id,))
        return bool(rows)

    def delete(self, workout_id: str) -> None:
        if not self.exists(workout_id):
            raise ValueError("workout not found")
        self.execute("DELETE FROM workouts WHERE id = ?;", (workout_id,))
        logger.debug("deleted workout %s", workout_id)

    def delete_all(self) -> None:
        self._delete_all("workouts")

    def _load(self, workout_id: Optional[str] = None) -> list[Workout]:
        where = " WHERE id = ?" if workout_id is not None else ""
        params: Tuple = (workout_id,) if workout_id is not None else ()
        workout_rows = self.fetch_all(
            "SELECT id, name, started_at, finished_at, completed, notes FROM workouts"
            f"{where} ORDER BY started_at DESC, id;",
            params,
        )
        if not workout_rows:
            return []
        entry_where = " WHERE we.workout_id = ?" if workout_id is not None else ""
        entry_rows = self.fetch_all(
            "SELECT we.id, we.workout_id, we.order_index, we.target_reps, we.notes, "
            "e.id, e.name, e.category, e.is_bodyweight, e.muscle_groups "
            "FROM workout_exercises we JOIN exercises e ON e.id = we.exercise_id"
            f"{entry_where} ORDER BY we.workout_id, we.position;",
            params,
        )
        set_rows = self.fetch_all(
            "SELECT s.workout_exercise_id, s.weight, s.reps, s.completed, "
            "s.duration_seconds, s.distance_km, s.rest_seconds "
            "FROM sets s JOIN workout_exercises we ON we.id = s.workout_exercise_id"
            f"{entry_where} ORDER BY s.workout_exercise_id, s.position;",
            params,
        )
        sets_by_entry: dict[int, list[WorkoutSet]] = {}
        for entry_id, weight, reps, completed, duration, distance, rest in set_rows:
            sets_by_entry.setdefault(entry_id, []).append(
                WorkoutSet(
                    weight=weight,
                    reps=reps,
                    completed=_optional_bool(completed),
                    duration_seconds=duration,
                    distance_km=distance,
                    rest_seconds=rest,
                )
            )
        entries_by_workout: dict[str, list[WorkoutExercise]] = {}
        for (
            entry_id,
            wid,
            order_index,
            target_reps,
            notes,
            ex_id,
            ex_name,
            category,
            is_bodyweight,
            muscle_groups,
        ) in entry_rows:
            entries_by_workout.setdefault(wid, []).append(
                WorkoutExercise(
                    exercise=Exercise(
                        id=ex_id,
                        name=ex_name,
                        category=category,
                        is_bodyweight=_optional_bool(is_bodyweight),
                        muscle_groups=json.loads(muscle_groups or "[]"),
                    ),
                    sets=sets_by_entry.get(entry_id, []),
                    order_index=order_index,
                    target_reps=target_reps,
                    notes=notes,
                )
            )
        return [
            Workout(
                id=wid,
                name=name,
                started_at=started_at,
                finished_at=finished_at,
                completed=_optional_bool(completed),
                exercises=entries_by_workout.get(wid, []),
                notes=notes,
            )
            for wid, name, started_at, finished_at, completed, notes in workout_rows
        ]
