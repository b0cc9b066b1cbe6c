import unittest

from gpa_tracker.backend_logic import project_cgpa
from gpa_tracker.course_records import Semester, new_course
from gpa_tracker.grade_scale import SCALE_5_0
from gpa_tracker.reports import (
    dashboard_summary,
    gpa_trend,
    grade_distribution,
    impactful_courses,
    projection_frame,
    semester_report,
    target_progress,
)
from gpa_tracker.settings import Settings
from gpa_tracker.store import GradebookStore


def make(code, units, score, created_at):
    return new_course(code, units, score, SCALE_5_0,
                      course_id=f"{code}-{created_at}", created_at=created_at)


class DashboardTests(unittest.TestCase):
    def test_empty_state(self):
        summary = dashboard_summary(GradebookStore())
        self.assertEqual(summary["cgpa"], 0)
        self.assertEqual(summary["total_units"], 0)
        self.assertEqual(summary["semester_count"], 0)
        self.assertEqual(summary["latest_semester_gpa"], 0)
        self.assertIsNone(summary["latest_semester_label"])
        self.assertEqual(summary["target_progress"], 0)

    def test_summary(self):
        s1 = Semester("s1", "2023/2024", 1, 100, created_at=1)
        s2 = Semester("s2", "2023/2024", 2, 100, created_at=2)
        store = GradebookStore(
            [s1, s2],
            {"s1": [make("MTH101", 3, 70, 10), make("PHY101", 4, 60, 11)],
             "s2": [make("CHM101", 2, 50, 20)]},
            Settings(target_cgpa=4.5),
        )
        summary = dashboard_summary(store)
        # (15 + 16 + 6) / 9
        self.assertEqual(summary["cgpa"], 4.11)
        self.assertEqual(summary["total_units"], 9)
        self.assertEqual(summary["total_quality_points"], 37)
        self.assertEqual(summary["semester_count"], 2)
        self.assertEqual(summary["latest_semester_gpa"], 3.0)
        self.assertEqual(summary["latest_semester_units"], 2)
        self.assertEqual(summary["max_gpa"], 5.0)
        self.assertAlmostEqual(summary["target_progress"], 4.11 / 4.5 * 100)


class TrendTests(unittest.TestCase):
    def test_cumulative_by_creation_order(self):
        late = Semester("s2", "2024/2025", 1, 200, created_at=2)
        early = Semester("s1", "2023/2024", 1, 100, created_at=1)
        courses = {
            "s2": [make("CHM101", 2, 50, 20)],
            "s1": [make("MTH101", 3, 70, 10), make("PHY101", 4, 60, 11)],
        }
        frame = gpa_trend([late, early], courses, "replace")
        self.assertEqual(list(frame["semester"]), ["100L 1", "200L 1"])
        self.assertEqual(list(frame["gpa"]), [4.43, 3.0])
        self.assertEqual(list(frame["cgpa"]), [4.43, 4.11])

    def test_trend_applies_retake_policy(self):
        s1 = Semester("s1", "2023/2024", 1, 100, created_at=1)
        s2 = Semester("s2", "2023/2024", 2, 100, created_at=2)
        courses = {"s1": [make("MTH101", 3, 30, 10)], "s2": [make("MTH101", 3, 70, 20)]}
        self.assertEqual(list(gpa_trend([s1, s2], courses, "replace")["cgpa"]), [0.0, 5.0])
        self.assertEqual(list(gpa_trend([s1, s2], courses, "keep-both")["cgpa"]), [0.0, 2.5])

    def test_empty(self):
        frame = gpa_trend([], {}, "replace")
        self.assertTrue(frame.empty)
        self.assertEqual(list(frame.columns), ["semester", "gpa", "cgpa"])


class DistributionTests(unittest.TestCase):
    def test_counts_in_scale_order(self):
        courses = [make("A1", 3, 75, 1), make("A2", 3, 90, 2), make("C1", 2, 55, 3), make("F1", 1, 10, 4)]
        dist = grade_distribution(courses, SCALE_5_0)
        self.assertEqual(list(dist.index), ["A", "B", "C", "D", "E", "F"])
        self.assertEqual(list(dist), [2, 0, 1, 0, 0, 1])

    def test_empty(self):
        dist = grade_distribution([], SCALE_5_0)
        self.assertEqual(int(dist.sum()), 0)
        self.assertEqual(len(dist), 6)

    def test_single_semester_counts_only_its_courses(self):
        s1 = Semester("s1", "2023/2024", 1, 100, created_at=1)
        s2 = Semester("s2", "2023/2024", 2, 100, created_at=2)
        store = GradebookStore(
            [s1, s2],
            {"s1": [make("MTH101", 3, 70, 10), make("PHY101", 4, 60, 11)],
             "s2": [make("CHM101", 2, 50, 20)]},
        )
        dist = grade_distribution(store.courses_for("s1"), store.settings.grade_mapping)
        self.assertEqual(list(dist), [1, 1, 0, 0, 0, 0])
        dist = grade_distribution(store.courses_for("s2"), store.settings.grade_mapping)
        self.assertEqual(list(dist), [0, 0, 1, 0, 0, 0])


class SemesterReportTests(unittest.TestCase):
    def test_report(self):
        semester = Semester("s1", "2023/2024", 1, 100, created_at=1)
        courses = [make("MTH101", 3, 46, 1), make("PHY101", 2, 40, 2), make("CHM101", 4, 80, 3)]
        report = semester_report(semester, courses)
        self.assertEqual(report["label"], "100L 2023/2024 (Term 1)")
        # (6 + 2 + 20) / 9
        self.assertEqual(report["gpa"], 3.11)
        self.assertEqual(report["units"], 9)
        self.assertEqual(report["course_count"], 3)
        self.assertEqual([c.code for c in report["impactful_courses"]], ["MTH101"])

    def test_impactful_courses(self):
        courses = [make("LOW", 3, 50, 1), make("HIGH", 3, 70, 2), make("SMALL", 1, 0, 3)]
        self.assertEqual([c.code for c in impactful_courses(courses)], [])
        courses.append(make("BAD", 4, 49, 4))
        self.assertEqual([c.code for c in impactful_courses(courses)], ["BAD"])


class ProgressTests(unittest.TestCase):
    def test_target_progress(self):
        self.assertEqual(target_progress(2.0, 4.0), 50.0)
        self.assertEqual(target_progress(4.5, 4.0), 100.0)
        self.assertEqual(target_progress(3.0, 0), 100.0)

    def test_projection_frame(self):
        frame = projection_frame(project_cgpa(3.0, 20, 4.0, 2, 15, max_gpa=4.0))
        self.assertEqual(list(frame.index), ["Sem 1", "Sem 2"])
        self.assertEqual(list(frame["required_gpa"]), [4.0, 4.0])
        self.assertEqual(frame.loc["Sem 2", "projected_gpa"], 4.0)


if __name__ == "__main__":
    unittest.main()
