import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from models import Exercise, Rationale, WorkoutSet
from progression_advisor import ProgressionAdvisor, SessionPerformance
from record_index import RecordIndex
from seed_sample_data import DAY, PULL_UP, RUN, SQUAT, make_workout, strength_sets
from settings_schema import AnalyticsSettings


def squat_history(*sessions, target_reps=None):
    return [
        make_workout(f"s{i + 1}", (i + 1) * DAY, [(SQUAT, sets)], target_reps=target_reps)
        for i, sets in enumerate(sessions)
    ]


def with_missed(weight, done, missed=1):
    return strength_sets(weight, done) + strength_sets(weight, [done[0]] * missed, completed=False)


class ProgressionAdvisorTest(unittest.TestCase):
    def setUp(self) -> None:
        self.advisor = ProgressionAdvisor()

    def test_no_history_returns_none(self) -> None:
        self.assertIsNone(self.advisor.suggest([], "squat"))
        history = squat_history(strength_sets(100, [5]))
        self.assertIsNone(self.advisor.suggest(history, "bench"))

    def test_uncounted_sessions_are_not_history(self) -> None:
        history = [
            make_workout("open", DAY, [(SQUAT, strength_sets(100, [5]))], finished=False)
        ]
        self.assertIsNone(self.advisor.suggest(history, "squat"))

    def test_increasing_reps_suggest_increase(self) -> None:
        history = squat_history(
            strength_sets(100, [5, 5, 5]),
            strength_sets(100, [6, 6, 6]),
            strength_sets(100, [7, 7, 7]),
            strength_sets(100, [8, 8, 8]),
        )
        suggestion = self.advisor.suggest(history, "squat")
        self.assertEqual(suggestion.rationale, Rationale.INCREASE)
        self.assertEqual(suggestion.suggested_weight, 102.5)
        self.assertEqual(suggestion.suggested_reps, 8)
        self.assertEqual(suggestion.suggested_sets, 3)
        self.assertEqual(suggestion.current_weight, 100)
        self.assertEqual(suggestion.current_reps, 8)
        self.assertTrue(suggestion.targets_record)
        self.assertIn("102.5 kg", suggestion.reasoning)

    def test_single_complete_session_suggests_increase(self) -> None:
        history = squat_history(strength_sets(100, [5, 5, 5]))
        suggestion = self.advisor.suggest(history, "squat")
        self.assertEqual(suggestion.rationale, Rationale.INCREASE)
        self.assertEqual(suggestion.suggested_weight, 102.5)

    def test_fewer_completed_sets_holds(self) -> None:
        history = squat_history(
            strength_sets(100, [5, 5, 5]),
            with_missed(100, [5, 5]),
        )
        suggestion = self.advisor.suggest(history, "squat")
        self.assertEqual(suggestion.rationale, Rationale.HOLD)
        self.assertEqual(suggestion.suggested_weight, 100)
        self.assertEqual(suggestion.suggested_reps, 5)
        self.assertEqual(suggestion.suggested_sets, 3)
        self.assertEqual(suggestion.current_sets, 2)

    def test_fewer_reps_at_same_weight_holds(self) -> None:
        history = squat_history(
            strength_sets(100, [6, 6, 6]),
            strength_sets(100, [5, 5, 4]),
        )
        suggestion = self.advisor.suggest(history, "squat")
        self.assertEqual(suggestion.rationale, Rationale.HOLD)

    def test_two_regressions_in_a_row_deload(self) -> None:
        history = squat_history(
            strength_sets(100, [5, 5, 5]),
            with_missed(100, [5, 5]),
            with_missed(100, [5], missed=2),
        )
        suggestion = self.advisor.suggest(history, "squat")
        self.assertEqual(suggestion.rationale, Rationale.DELOAD)
        self.assertEqual(suggestion.suggested_weight, 90.0)
        self.assertEqual(suggestion.suggested_reps, 5)

    def test_window_size_limits_the_trend(self) -> None:
        history = squat_history(
            strength_sets(100, [5, 5, 5]),
            with_missed(100, [5, 5]),
            with_missed(100, [5], missed=2),
        )
        advisor = ProgressionAdvisor(AnalyticsSettings(history_sessions=2))
        self.assertEqual(advisor.suggest(history, "squat").rationale, Rationale.HOLD)

    def test_missed_set_without_regression_holds(self) -> None:
        history = squat_history(
            strength_sets(100, [5, 5, 5]),
            with_missed(100, [5, 5, 5]),
        )
        suggestion = self.advisor.suggest(history, "squat")
        self.assertEqual(suggestion.rationale, Rationale.HOLD)
        self.assertEqual(suggestion.suggested_sets, 4)

    def test_planned_reps_must_be_reached(self) -> None:
        missed = squat_history(strength_sets(100, [8, 8, 6]), target_reps=8)
        self.assertEqual(
            self.advisor.suggest(missed, "squat").rationale, Rationale.HOLD
        )
        reached = squat_history(strength_sets(100, [8, 8, 8]), target_reps=8)
        suggestion = self.advisor.suggest(reached, "squat")
        self.assertEqual(suggestion.rationale, Rationale.INCREASE)
        self.assertEqual(suggestion.suggested_reps, 8)

    def test_light_weight_moves_up_at_least_one_increment(self) -> None:
        history = squat_history(strength_sets(5, [10, 10]))
        suggestion = self.advisor.suggest(history, "squat")
        self.assertEqual(suggestion.suggested_weight, 5.5)

    def test_bodyweight_exercise_adds_reps(self) -> None:
        history = [
            make_workout("p1", DAY, [(PULL_UP, strength_sets(None, [6, 6, 5]))]),
        ]
        suggestion = self.advisor.suggest(history, "pull-up")
        self.assertEqual(suggestion.rationale, Rationale.INCREASE)
        self.assertIsNone(suggestion.suggested_weight)
        self.assertEqual(suggestion.suggested_reps, 8)
        self.assertEqual(suggestion.reasoning, "All sets done, try 8 reps next time")

    def test_cardio_exercise_has_no_suggestion(self) -> None:
        history = [
            make_workout(
                "r1",
                DAY,
                [(RUN, [WorkoutSet(completed=True, duration_seconds=900, distance_km=2.5)])],
            )
        ]
        self.assertIsNone(self.advisor.suggest(history, "run"))

    def test_repeated_entries_merge_into_one_session(self) -> None:
        skipped_warmup = make_workout(
            "w1",
            DAY,
            [
                (SQUAT, strength_sets(60, [5], completed=False)),
                (SQUAT, strength_sets(100, [5, 5, 5])),
            ],
        )
        suggestion = self.advisor.suggest([skipped_warmup], "squat")
        self.assertEqual(suggestion.rationale, Rationale.HOLD)
        self.assertEqual(suggestion.current_weight, 100)
        self.assertEqual(suggestion.current_sets, 3)

        done_warmup = make_workout(
            "w2",
            DAY,
            [
                (SQUAT, strength_sets(60, [5])),
                (SQUAT, strength_sets(100, [5, 5, 5])),
            ],
        )
        suggestion = self.advisor.suggest([done_warmup], "squat")
        self.assertEqual(suggestion.rationale, Rationale.INCREASE)
        self.assertEqual(suggestion.suggested_weight, 102.5)
        self.assertEqual(suggestion.suggested_sets, 4)

    def test_record_reference_comes_from_whole_history(self) -> None:
        history = squat_history(
            strength_sets(150, [1]),
            strength_sets(100, [5, 5, 5]),
            strength_sets(100, [5, 5, 5]),
            strength_sets(100, [5, 5, 5]),
        )
        suggestion = self.advisor.suggest(history, "squat")
        self.assertEqual(suggestion.rationale, Rationale.INCREASE)
        self.assertFalse(suggestion.targets_record)
        empty = RecordIndex()
        self.assertTrue(
            self.advisor.suggest(history, "squat", records=empty).targets_record
        )

    def test_unit_follows_settings(self) -> None:
        advisor = ProgressionAdvisor(AnalyticsSettings(weight_unit="lbs"))
        history = squat_history(strength_sets(200, [5]))
        self.assertIn("205 lbs", advisor.suggest(history, "squat").reasoning)


class SessionPerformanceTest(unittest.TestCase):
    def test_primary_set_is_heaviest(self) -> None:
        workout = make_workout("w", DAY, [(SQUAT, strength_sets(100, [5]) + strength_sets(110, [3]))])
        perf = SessionPerformance.from_entry(workout, workout.exercises[0])
        self.assertEqual(perf.primary_weight, 110)
        self.assertEqual(perf.primary_reps, 3)
        self.assertEqual(perf.min_reps, 3)
        self.assertTrue(perf.target_met)

    def test_set_without_weight_is_not_working_for_weighted_exercise(self) -> None:
        exercise = Exercise(id="row", name="Row")
        workout = make_workout("w", DAY, [(exercise, [WorkoutSet(reps=10, completed=True)])])
        perf = SessionPerformance.from_entry(workout, workout.exercises[0])
        self.assertEqual(perf.working, [])
        self.assertFalse(perf.target_met)
        self.assertIsNone(ProgressionAdvisor().suggest([workout], "row"))


if __name__ == "__main__":
    unittest.main()
