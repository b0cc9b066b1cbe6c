import unittest

from gpa_tracker.backend_logic import cgpa
from gpa_tracker.course_records import new_course
from gpa_tracker.grade_scale import SCALE_5_0
from gpa_tracker.retakes import (
    KEEP_BOTH,
    REPLACE,
    apply_retake_policy,
    identify_retakes,
    resolve_for_aggregation,
)


def make(code, score, created_at, units=3):
    return new_course(code, units, score, SCALE_5_0,
                      course_id=f"{code}-{created_at}", created_at=created_at)


class IdentifyRetakesTests(unittest.TestCase):
    def test_codes_in_several_semesters(self):
        by_semester = {
            "s1": [make("MTH101", 30, 1), make("PHY101", 60, 2)],
            "s2": [make("MTH101", 65, 3)],
            "s3": [make("mth101", 72, 4), make("CHM101", 50, 5)],
        }
        self.assertEqual(identify_retakes(by_semester), {"MTH101": {"s1", "s2", "s3"}})

    def test_no_retakes(self):
        by_semester = {"s1": [make("MTH101", 30, 1)], "s2": [make("PHY101", 60, 2)]}
        self.assertEqual(identify_retakes(by_semester), {})
        self.assertEqual(identify_retakes({}), {})

    def test_repeat_within_one_semester_is_not_a_retake(self):
        by_semester = {"s1": [make("MTH101", 30, 1), make("MTH101", 40, 2)]}
        self.assertEqual(identify_retakes(by_semester), {})


class ApplyRetakePolicyTests(unittest.TestCase):
    def setUp(self):
        self.first = make("MTH101", 30, 1)
        self.other = make("PHY101", 60, 2)
        self.second = make("MTH101", 65, 3)
        self.courses = [self.first, self.other, self.second]

    def test_keep_both_is_a_no_op(self):
        result = apply_retake_policy(self.courses, KEEP_BOTH, {"MTH101"})
        self.assertEqual(result, self.courses)
        self.assertIsNot(result, self.courses)

    def test_replace_keeps_latest_attempt(self):
        result = apply_retake_policy(self.courses, REPLACE, {"MTH101"})
        self.assertEqual(result, [self.other, self.second])

    def test_replace_picks_by_created_at_not_position(self):
        result = apply_retake_policy([self.second, self.other, self.first], REPLACE, {"MTH101"})
        self.assertEqual(result, [self.second, self.other])

    def test_replace_matches_codes_case_insensitively(self):
        lower = make("mth101", 70, 9)
        result = apply_retake_policy([self.first, lower], REPLACE, {"Mth101"})
        self.assertEqual(result, [lower])

    def test_replace_leaves_non_retakes_alone(self):
        result = apply_retake_policy(self.courses, REPLACE, set())
        self.assertEqual(result, self.courses)

    def test_input_not_mutated(self):
        original = list(self.courses)
        apply_retake_policy(self.courses, REPLACE, {"MTH101"})
        self.assertEqual(self.courses, original)

    def test_unknown_policy(self):
        with self.assertRaises(ValueError):
            apply_retake_policy(self.courses, "best-of", {"MTH101"})


class ResolveForAggregationTests(unittest.TestCase):
    def test_policy_changes_cgpa(self):
        by_semester = {
            "s1": [make("MTH101", 30, 1), make("PHY101", 70, 2)],
            "s2": [make("MTH101", 70, 3)],
        }
        # keep-both: (0 + 15 + 15) / 9
        self.assertEqual(cgpa(resolve_for_aggregation(by_semester, KEEP_BOTH)), 3.33)
        # replace: (15 + 15) / 6
        self.assertEqual(cgpa(resolve_for_aggregation(by_semester, REPLACE)), 5.0)


if __name__ == "__main__":
    unittest.main()
