"""
Retake handling.

A retake is a course code that shows up in more than one semester. Codes are
matched case-insensitively (after stripping whitespace), the same rule used
for duplicate detection inside a semester.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Set

from .course_records import Course, normalise_code

REPLACE = "replace"
KEEP_BOTH = "keep-both"
RETAKE_POLICIES = (REPLACE, KEEP_BOTH)


def identify_retakes(courses_by_semester: Mapping[str, Iterable[Course]]) -> Dict[str, Set[str]]:
    """
    courses_by_semester: {semester_id: [Course, ...]}
    returns: {normalised code: {semester_id, ...}} for codes seen in 2+ semesters
    """
    seen = defaultdict(set)
    for semester_id, courses in courses_by_semester.items():
        for course in courses:
            seen[normalise_code(course.code)].add(semester_id)

    return {code: sems for code, sems in seen.items() if len(sems) > 1}


def apply_retake_policy(courses: Iterable[Course], policy: str,
                        retake_codes: Iterable[str]) -> List[Course]:
    """
    keep-both: every attempt counts.
    replace:   for each retake code only the latest attempt (largest
               created_at) is kept; other courses pass through.
    Returns a new list in input order.
    """
    courses = list(courses)
    if policy not in RETAKE_POLICIES:
        raise ValueError(f"policy must be one of {list(RETAKE_POLICIES)} (got {policy!r})")

    if policy == KEEP_BOTH:
        return courses

    codes = {normalise_code(c) for c in retake_codes}

    latest: Dict[str, Course] = {}
    for course in courses:
        key = normalise_code(course.code)
        if key not in codes:
            continue
        if key not in latest or course.created_at > latest[key].created_at:
            latest[key] = course

    kept = []
    for course in courses:
        key = normalise_code(course.code)
        if key in codes and latest[key] is not course:
            continue
        kept.append(course)
    return kept


def resolve_for_aggregation(courses_by_semester: Mapping[str, Iterable[Course]],
                            policy: str) -> List[Course]:
    """Flatten every semester and apply the retake policy in one pass."""
    by_semester = {sid: list(cs) for sid, cs in courses_by_semester.items()}
    flat = [c for cs in by_semester.values() for c in cs]
    retakes = identify_retakes(by_semester)
    return apply_retake_policy(flat, policy, retakes.keys())
