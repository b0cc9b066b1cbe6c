import pandas as pd
from typing import Iterable, List, Mapping

from .backend_logic import cgpa, semester_gpa, totals
from .course_records import Course, Semester
from .retakes import resolve_for_aggregation
from .settings import IMPACTFUL_MAX_POINT, IMPACTFUL_MIN_UNITS


def target_progress(current: float, target: float) -> float:
    """Percentage of the way to target, capped at 100."""
    if target <= 0:
        return 100.0
    return min(current / target * 100.0, 100.0)


def impactful_courses(courses: Iterable[Course]) -> List[Course]:
    """High-unit, low-grade courses: the ones dragging a GPA down the most."""
    return [
        c for c in courses
        if c.units >= IMPACTFUL_MIN_UNITS and c.grade_point <= IMPACTFUL_MAX_POINT
    ]


def grade_distribution(courses: Iterable[Course], scale) -> pd.Series:
    """Number of courses per letter, in scale order, zeros included."""
    letters = [band.letter for band in scale]
    counts = pd.Series([c.grade_letter for c in courses], dtype=object).value_counts()
    return counts.reindex(letters, fill_value=0).astype(int).rename("courses")


def gpa_trend(semesters: Iterable[Semester],
              courses_by_semester: Mapping[str, Iterable[Course]],
              retake_policy: str) -> pd.DataFrame:
    """
    One row per semester (creation order): that semester's GPA and the CGPA
    over every semester up to and including it.
    """
    ordered = sorted(semesters, key=lambda s: s.created_at)
    rows = []
    so_far = {}
    for semester in ordered:
        courses = list(courses_by_semester.get(semester.id, []))
        so_far[semester.id] = courses
        rows.append({
            "semester": f"{semester.level}L {semester.term}",
            "gpa": semester_gpa(courses),
            "cgpa": cgpa(resolve_for_aggregation(so_far, retake_policy)),
        })
    return pd.DataFrame(rows, columns=["semester", "gpa", "cgpa"])


def semester_report(semester: Semester, courses: Iterable[Course]) -> dict:
    courses = list(courses)
    t = totals(courses)
    return {
        "label": semester.label,
        "gpa": semester_gpa(courses),
        "units": t["units"],
        "quality_points": t["quality_points"],
        "course_count": len(courses),
        "impactful_courses": impactful_courses(courses),
    }


def dashboard_summary(store) -> dict:
    """
    store: GradebookStore
    returns: the figures shown on the dashboard cards
    """
    settings = store.settings
    counted = store.aggregation_courses()
    overall = totals(counted)
    current = cgpa(counted)

    latest = store.latest_semester()
    latest_courses = store.courses_for(latest.id) if latest else []

    return {
        "cgpa": current,
        "total_units": overall["units"],
        "total_quality_points": overall["quality_points"],
        "semester_count": len(store.semesters),
        "latest_semester_label": latest.label if latest else None,
        "latest_semester_gpa": semester_gpa(latest_courses),
        "latest_semester_units": totals(latest_courses)["units"],
        "target_cgpa": settings.target_cgpa,
        "max_gpa": settings.max_gpa,
        "target_progress": target_progress(current, settings.target_cgpa),
    }


def projection_frame(projection: dict) -> pd.DataFrame:
    """Chart-ready table from backend_logic.project_cgpa output."""
    frame = pd.DataFrame(
        projection["steps"],
        columns=["semester", "semester_gpa", "projected_gpa", "required_gpa", "target_gpa"],
    )
    return frame.set_index("semester")
