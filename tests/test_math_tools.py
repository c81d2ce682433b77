import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms.math_tools import MathTools
from models import Workout, WorkoutSet
from seed_sample_data import BENCH, SQUAT, make_workout, strength_sets


class MathToolsTestCase(unittest.TestCase):
    def test_clamp(self) -> None:
        self.assertEqual(MathTools.clamp(5, 0, 10), 5)
        self.assertEqual(MathTools.clamp(-1, 0, 10), 0)
        self.assertEqual(MathTools.clamp(11, 0, 10), 10)
        with self.assertRaises(ValueError):
            MathTools.clamp(1, 2, 1)

    def test_one_rep_max_single_rep_is_raw_weight(self) -> None:
        self.assertEqual(MathTools.estimated_one_rep_max(100, 1), 100)

    def test_one_rep_max_epley(self) -> None:
        self.assertAlmostEqual(
            MathTools.estimated_one_rep_max(100, 10), 100 * (1 + 10 / 30)
        )
        self.assertAlmostEqual(MathTools.estimated_one_rep_max(100, 10), 133.33, places=2)

    def test_one_rep_max_missing_inputs(self) -> None:
        self.assertIsNone(MathTools.estimated_one_rep_max(None, 5))
        self.assertIsNone(MathTools.estimated_one_rep_max(100, None))
        self.assertIsNone(MathTools.estimated_one_rep_max(0, 5))
        self.assertIsNone(MathTools.estimated_one_rep_max(100, 0))

    def test_set_volume(self) -> None:
        self.assertEqual(MathTools.set_volume(WorkoutSet(weight=100, reps=5)), 500)
        self.assertEqual(MathTools.set_volume(WorkoutSet(reps=5)), 0.0)
        self.assertEqual(MathTools.set_volume(WorkoutSet(weight=100)), 0.0)

    def test_session_volume_counts_completed_sets(self) -> None:
        workout = make_workout("w1", 0, [(SQUAT, strength_sets(100, [5, 5]))])
        self.assertEqual(MathTools.session_volume(workout), 1000)

    def test_session_volume_skips_incomplete_sets(self) -> None:
        workout = make_workout(
            "w1",
            0,
            [
                (SQUAT, strength_sets(100, [5, 5]) + strength_sets(100, [5], completed=False)),
                (BENCH, strength_sets(50, [10])),
            ],
        )
        self.assertEqual(MathTools.session_volume(workout), 1500)
        self.assertEqual(MathTools.session_volume(Workout(id="empty", started_at=0)), 0)

    def test_speed(self) -> None:
        self.assertAlmostEqual(MathTools.speed_kmh(5.0, 1800), 10.0)
        self.assertIsNone(MathTools.speed_kmh(None, 1800))
        self.assertIsNone(MathTools.speed_kmh(5.0, 0))

    def test_relative_change(self) -> None:
        self.assertAlmostEqual(MathTools.relative_change(110.0, 100.0), 10.0)
        self.assertAlmostEqual(MathTools.relative_change(50.0, 100.0), -50.0)
        self.assertEqual(MathTools.relative_change(100.0, 0.0), 0.0)

    def test_round_to_increment(self) -> None:
        self.assertEqual(MathTools.round_to_increment(102.5, 0.5), 102.5)
        self.assertEqual(MathTools.round_to_increment(61.5, 2.5), 62.5)
        self.assertEqual(MathTools.round_to_increment(90.2, 0.5), 90.0)
        with self.assertRaises(ValueError):
            MathTools.round_to_increment(10, 0)

    def test_mean(self) -> None:
        self.assertEqual(MathTools.mean([]), 0.0)
        self.assertAlmostEqual(MathTools.mean([30, 60, 90]), 60.0)


if __name__ == "__main__":
    unittest.main()
