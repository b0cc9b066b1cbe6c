from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

import numpy as np

from .course_records import Course

# ------------------------
# Rounding
# ------------------------
def round_2dp_half_up(x: float) -> float:
    return float(Decimal(str(x)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


# ------------------------
# Aggregation
# ------------------------
def points_and_units(courses: Iterable[Course]) -> np.ndarray:
    """
    returns: Nx2 numpy array -> [grade_point, units]
    """
    rows = [(c.grade_point, c.units) for c in courses]
    if not rows:
        return np.zeros((0, 2), dtype=float)
    return np.array(rows, dtype=float)


def totals(courses: Iterable[Course]) -> dict:
    gc = points_and_units(courses)
    if gc.size == 0:
        return {"units": 0.0, "quality_points": 0.0}

    points = gc[:, 0]
    units = gc[:, 1]
    return {
        "units": float(units.sum()),
        "quality_points": float(np.dot(points, units)),
    }


def weighted_gpa(courses: Iterable[Course]) -> float:
    """
    Units-weighted mean grade point, rounded to 2dp.
    Empty input or zero total units gives 0.
    """
    t = totals(courses)
    if t["units"] == 0:
        return 0.0
    return round_2dp_half_up(t["quality_points"] / t["units"])


def semester_gpa(courses: Iterable[Course]) -> float:
    return weighted_gpa(courses)


def cgpa(all_courses: Iterable[Course]) -> float:
    """
    all_courses: every course across every semester, already flattened.
    Same formula as semester_gpa over the full set; never an average of
    per-semester GPAs.
    """
    return weighted_gpa(all_courses)


# ------------------------
# Planner
# ------------------------
def required_gpa(current_cgpa: float,
                 target_cgpa: float,
                 remaining_semesters: int,
                 units_completed: float,
                 units_per_semester: float) -> float:
    """
    Average GPA needed over every remaining semester to finish on target_cgpa.
    Can exceed the scale maximum, meaning the target is out of reach.
    """
    if remaining_semesters <= 0:
        return 0.0

    future_units = remaining_semesters * units_per_semester
    if future_units == 0:
        return 0.0

    needed = target_cgpa * (units_completed + future_units)
    banked = current_cgpa * units_completed
    return round_2dp_half_up((needed - banked) / future_units)


def is_achievable(required: float, max_gpa: float) -> bool:
    return required <= max_gpa


def project_cgpa(current_cgpa: float,
                 units_completed: float,
                 target_cgpa: float,
                 remaining_semesters: int,
                 units_per_semester: float,
                 max_gpa: float,
                 what_if_gpa: Optional[float] = None,
                 clamp_feedback: bool = False) -> dict:
    """
    Simulate the remaining semesters at the required GPA.

    The first simulated semester uses what_if_gpa instead when one is given.
    Quality points and units accumulate across steps. Each step's
    projected_gpa is clamped to max_gpa for display; the running totals stay
    unclamped unless clamp_feedback is set, in which case the clamped value
    is carried into the next step.
    """
    required = required_gpa(
        current_cgpa=current_cgpa,
        target_cgpa=target_cgpa,
        remaining_semesters=remaining_semesters,
        units_completed=units_completed,
        units_per_semester=units_per_semester,
    )

    banked_points = current_cgpa * units_completed
    projected_units = units_completed
    projected = current_cgpa
    steps: List[dict] = []

    for i in range(1, max(remaining_semesters, 0) + 1):
        sem_gpa = required
        if what_if_gpa is not None and i == 1:
            sem_gpa = what_if_gpa

        banked_points += sem_gpa * units_per_semester
        projected_units += units_per_semester
        projected = banked_points / projected_units if projected_units else 0.0

        shown = min(projected, max_gpa)
        if clamp_feedback:
            projected = shown
            banked_points = shown * projected_units

        steps.append({
            "semester": f"Sem {i}",
            "semester_gpa": sem_gpa,
            "projected_gpa": shown,
            "required_gpa": min(required, max_gpa),
            "target_gpa": min(target_cgpa, max_gpa),
        })

    final_cgpa = projected
    return {
        "required_gpa": required,
        "achievable": is_achievable(required, max_gpa),
        "steps": steps,
        "final_cgpa": final_cgpa,
        "final_units": projected_units,
        "final_cgpa_rounded": round_2dp_half_up(final_cgpa),
        "achieves_target": final_cgpa >= target_cgpa,
    }
