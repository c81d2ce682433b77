import argparse
import dataclasses
import json
import logging
from typing import Optional

from pydantic import ValidationError

from config import load_settings
from db import WorkoutRepository
from logging_config import setup_logging
from models import Workout
from progress_session import ProgressSession
from seed_sample_data import seed

logger = logging.getLogger(__name__)


def _dump(data) -> str:
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        data = dataclasses.asdict(data)
    elif isinstance(data, list):
        data = [dataclasses.asdict(d) if dataclasses.is_dataclass(d) else d for d in data]
    return json.dumps(data, indent=2, default=str)


def _session(db_path: str, settings_path: Optional[str]) -> ProgressSession:
    session = ProgressSession(load_settings(settings_path))
    session.update(WorkoutRepository(db_path).load_workout_history())
    return session


def export_workouts(db_path: str, out_path: str) -> int:
    history = WorkoutRepository(db_path).load_workout_history()
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump([w.model_dump(mode="json") for w in history], f, indent=2)
    return len(history)


def import_workouts(in_path: str, db_path: str) -> int:
    """Load workouts from a JSON export; the whole file is validated first."""
    with open(in_path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError("export file must contain a list of workouts")
    try:
        workouts = [Workout.model_validate(item) for item in raw]
    except ValidationError as e:
        raise ValueError(str(e))
    repo = WorkoutRepository(db_path)
    for workout in workouts:
        repo.save_workout(workout)
    logger.info("imported %d workouts from %s", len(workouts), in_path)
    return len(workouts)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Workout progress utilities")
    parser.add_argument("--db", default="workout.db")
    parser.add_argument("--settings", default=None)
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("records")
    sub.add_parser("stats")

    sug = sub.add_parser("suggest")
    sug.add_argument("--exercise", required=True)

    exp = sub.add_parser("export")
    exp.add_argument("--out", default="workouts.json")

    imp = sub.add_parser("import")
    imp.add_argument("--in", dest="src", required=True)

    sub.add_parser("demo")

    args = parser.parse_args(argv)
    setup_logging(load_settings(args.settings).log_level)

    if args.cmd == "records":
        print(_dump(_session(args.db, args.settings).personal_records))
    elif args.cmd == "stats":
        print(_dump(_session(args.db, args.settings).progress_stats))
    elif args.cmd == "suggest":
        found = _session(args.db, args.settings).suggestion_for(args.exercise)
        print(_dump(found))
    elif args.cmd == "export":
        count = export_workouts(args.db, args.out)
        print(json.dumps({"exported": count, "path": args.out}))
    elif args.cmd == "import":
        count = import_workouts(args.src, args.db)
        print(json.dumps({"imported": count}))
    elif args.cmd == "demo":
        print(json.dumps({"seeded": seed(args.db)}))


if __name__ == "__main__":
    main()
