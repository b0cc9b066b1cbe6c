import math
import re
import time
import uuid
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from .grade_scale import resolve_grade, score_for_letter

# ------------------------
# Records
# ------------------------

@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None


VALID = ValidationResult(True)


@dataclass(frozen=True)
class Course:
    """
    One scored course attempt within a semester.

    grade_letter / grade_point are derived from score under the scale that
    was active when the course was created or last updated. Build courses
    with new_course() / update_course() rather than setting them by hand.
    """
    id: str
    code: str
    units: int
    score: float
    grade_letter: str
    grade_point: float
    created_at: int
    title: Optional[str] = None


@dataclass(frozen=True)
class Semester:
    id: str
    session: str   # "2023/2024"
    term: int      # 1, 2 or 3
    level: int     # 100, 200, ...
    created_at: int

    @property
    def label(self) -> str:
        return f"{self.level}L {self.session} (Term {self.term})"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


def normalise_code(code: str) -> str:
    return code.strip().upper()


# ------------------------
# Validation
# ------------------------

def validate_course(code: str, units: float, score: float) -> ValidationResult:
    if not code or not code.strip():
        return ValidationResult(False, "Course code is required")
    # NaN fails every comparison, so check the accepted ranges positively
    if not (math.isfinite(units) and units > 0):
        return ValidationResult(False, "Units must be greater than 0")
    if units != int(units):
        return ValidationResult(False, "Units must be a whole number")
    if not (math.isfinite(score) and 0 <= score <= 100):
        return ValidationResult(False, "Score must be between 0 and 100")
    return VALID


def validate_letter(letter: str, scale) -> ValidationResult:
    if not letter or score_for_letter(letter, scale) is None:
        return ValidationResult(False, "Invalid grade letter")
    return VALID


SESSION_PATTERN = re.compile(r"^(\d{4})/(\d{4})$")


def validate_semester(session: str, term: int, level: int) -> ValidationResult:
    if not session or not session.strip():
        return ValidationResult(False, "Session is required")
    if not SESSION_PATTERN.match(session.strip()):
        return ValidationResult(False, "Session must be in the format YYYY/YYYY")
    if term not in (1, 2, 3):
        return ValidationResult(False, "Term must be 1, 2 or 3")
    if level <= 0 or level % 100 != 0:
        return ValidationResult(False, "Level must be a positive multiple of 100")
    return VALID


def has_duplicate_course_code(courses: Iterable[Course], code: str,
                              exclude_id: Optional[str] = None) -> bool:
    target = normalise_code(code)
    return any(
        normalise_code(c.code) == target and c.id != exclude_id
        for c in courses
    )


def quality_points(course: Course) -> float:
    return course.units * course.grade_point


# ------------------------
# Construction / derivation
# ------------------------

def new_course(code: str, units: int, score: float, scale,
               title: Optional[str] = None,
               course_id: Optional[str] = None,
               created_at: Optional[int] = None) -> Course:
    result = validate_course(code, units, score)
    if not result.valid:
        raise ValueError(result.error)

    grade = resolve_grade(score, scale)
    return Course(
        id=course_id or _new_id("course"),
        code=code.strip(),
        units=units,
        score=score,
        grade_letter=grade["letter"],
        grade_point=grade["point"],
        created_at=created_at if created_at is not None else _now_ms(),
        title=title.strip() if title and title.strip() else None,
    )


def new_course_from_letter(code: str, units: int, letter: str, scale,
                           title: Optional[str] = None,
                           course_id: Optional[str] = None,
                           created_at: Optional[int] = None) -> Course:
    """Letter entry stores the minimum score of the letter's band."""
    result = validate_letter(letter, scale)
    if not result.valid:
        raise ValueError(result.error)
    score = score_for_letter(letter, scale)
    return new_course(code, units, score, scale, title=title,
                      course_id=course_id, created_at=created_at)


UPDATABLE_FIELDS = frozenset({"code", "title", "units", "score"})


def update_course(course: Course, scale, **changes) -> Course:
    """
    Return a copy of course with changes applied and grade fields re-derived.

    Only code, title, units and score may change; grade_letter and
    grade_point always follow from score.
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {sorted(unknown)}")

    code = changes.get("code", course.code)
    units = changes.get("units", course.units)
    score = changes.get("score", course.score)
    title = changes.get("title", course.title)
    return new_course(code, units, score, scale, title=title,
                      course_id=course.id, created_at=course.created_at)


def recalculate_course(course: Course, scale) -> Course:
    grade = resolve_grade(course.score, scale)
    return replace(course, grade_letter=grade["letter"], grade_point=grade["point"])


def new_semester(session: str, term: int, level: int,
                 semester_id: Optional[str] = None,
                 created_at: Optional[int] = None) -> Semester:
    result = validate_semester(session, term, level)
    if not result.valid:
        raise ValueError(result.error)
    return Semester(
        id=semester_id or _new_id("semester"),
        session=session.strip(),
        term=int(term),
        level=int(level),
        created_at=created_at if created_at is not None else _now_ms(),
    )
