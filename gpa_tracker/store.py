"""
In-memory state container for one user's gradebook.

The engine functions never touch this object; callers build a store, pass it
around explicitly and feed its plain records into the engine.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .course_records import (
    Course,
    Semester,
    UPDATABLE_FIELDS,
    ValidationResult,
    has_duplicate_course_code,
    new_course,
    new_semester,
    recalculate_course,
    update_course,
    validate_course,
    validate_letter,
    validate_semester,
)
from .grade_scale import score_for_letter
from .retakes import resolve_for_aggregation
from .settings import Settings, default_settings

logger = logging.getLogger(__name__)

SEMESTER_NOT_FOUND = "Semester not found"
COURSE_NOT_FOUND = "Course not found"
DUPLICATE_CODE = "Course code already exists in this semester"


class GradebookStore:

    def __init__(self,
                 semesters: Optional[Iterable[Semester]] = None,
                 courses_by_semester: Optional[Dict[str, Iterable[Course]]] = None,
                 settings: Optional[Settings] = None):
        self._semesters: Dict[str, Semester] = {s.id: s for s in (semesters or [])}
        self._courses: Dict[str, List[Course]] = {sid: [] for sid in self._semesters}
        for sid, courses in (courses_by_semester or {}).items():
            if sid not in self._semesters:
                raise ValueError(f"Courses filed under unknown semester {sid!r}")
            kept: List[Course] = []
            for course in courses:
                if has_duplicate_course_code(kept, course.code):
                    raise ValueError(f"Semester {sid!r}: course code {course.code!r} appears more than once")
                kept.append(course)
            self._courses[sid] = kept
        self.settings = settings or default_settings()

    # ------------------------
    # Reads
    # ------------------------

    @property
    def semesters(self) -> List[Semester]:
        """Semesters ordered by creation time."""
        return sorted(self._semesters.values(), key=lambda s: s.created_at)

    @property
    def courses_by_semester(self) -> Dict[str, List[Course]]:
        return {sid: list(cs) for sid, cs in self._courses.items()}

    def get_semester(self, semester_id: str) -> Optional[Semester]:
        return self._semesters.get(semester_id)

    def courses_for(self, semester_id: str) -> List[Course]:
        return list(self._courses.get(semester_id, []))

    def all_courses(self) -> List[Course]:
        return [c for s in self.semesters for c in self._courses[s.id]]

    def aggregation_courses(self) -> List[Course]:
        """All courses with the configured retake policy applied."""
        ordered = {s.id: self._courses[s.id] for s in self.semesters}
        return resolve_for_aggregation(ordered, self.settings.retake_policy)

    def latest_semester(self) -> Optional[Semester]:
        semesters = self.semesters
        return semesters[-1] if semesters else None

    # ------------------------
    # Semesters
    # ------------------------

    def add_semester(self, session: str, term: int, level: int) -> Tuple[ValidationResult, Optional[Semester]]:
        result = validate_semester(session, term, level)
        if not result.valid:
            return result, None

        semester = new_semester(session, term, level)
        self._semesters[semester.id] = semester
        self._courses[semester.id] = []
        logger.info("Added semester %s (%s)", semester.id, semester.label)
        return result, semester

    def update_semester(self, semester_id: str, **changes) -> Tuple[ValidationResult, Optional[Semester]]:
        current = self._semesters.get(semester_id)
        if current is None:
            return ValidationResult(False, SEMESTER_NOT_FOUND), None

        session = changes.get("session", current.session)
        term = changes.get("term", current.term)
        level = changes.get("level", current.level)
        result = validate_semester(session, term, level)
        if not result.valid:
            return result, None

        updated = new_semester(session, term, level,
                               semester_id=current.id, created_at=current.created_at)
        self._semesters[semester_id] = updated
        return result, updated

    def delete_semester(self, semester_id: str) -> bool:
        if semester_id not in self._semesters:
            return False
        del self._semesters[semester_id]
        removed = self._courses.pop(semester_id, [])
        logger.info("Deleted semester %s and %d course(s)", semester_id, len(removed))
        return True

    # ------------------------
    # Courses
    # ------------------------

    def add_course(self, semester_id: str, code: str, units: int,
                   score: Optional[float] = None,
                   letter: Optional[str] = None,
                   title: Optional[str] = None) -> Tuple[ValidationResult, Optional[Course]]:
        """
        Record a course from either a numeric score or a letter grade.
        A letter is stored as the lowest score of its band.
        """
        if semester_id not in self._semesters:
            return ValidationResult(False, SEMESTER_NOT_FOUND), None

        scale = self.settings.grade_mapping
        if score is None:
            result = validate_letter(letter, scale)
            if not result.valid:
                return result, None
            score = score_for_letter(letter, scale)

        result = validate_course(code, units, score)
        if not result.valid:
            return result, None
        if has_duplicate_course_code(self._courses[semester_id], code):
            return ValidationResult(False, DUPLICATE_CODE), None

        course = new_course(code, units, score, scale, title=title)
        self._courses[semester_id].append(course)
        logger.info("Added course %s to semester %s", course.code, semester_id)
        return result, course

    def update_course(self, semester_id: str, course_id: str,
                      **changes) -> Tuple[ValidationResult, Optional[Course]]:
        courses = self._courses.get(semester_id)
        if courses is None:
            return ValidationResult(False, SEMESTER_NOT_FOUND), None
        index = next((i for i, c in enumerate(courses) if c.id == course_id), None)
        if index is None:
            return ValidationResult(False, COURSE_NOT_FOUND), None

        unknown = set(changes) - UPDATABLE_FIELDS - {"letter"}
        if unknown:
            return ValidationResult(False, f"Cannot update fields: {sorted(unknown)}"), None

        scale = self.settings.grade_mapping
        current = courses[index]
        letter = changes.pop("letter", None)
        if letter is not None and "score" not in changes:
            result = validate_letter(letter, scale)
            if not result.valid:
                return result, None
            changes["score"] = score_for_letter(letter, scale)

        result = validate_course(changes.get("code", current.code),
                                 changes.get("units", current.units),
                                 changes.get("score", current.score))
        if not result.valid:
            return result, None
        if has_duplicate_course_code(courses, changes.get("code", current.code), exclude_id=course_id):
            return ValidationResult(False, DUPLICATE_CODE), None

        updated = update_course(current, scale, **changes)
        self._courses[semester_id] = courses[:index] + [updated] + courses[index + 1:]
        return result, updated

    def delete_course(self, semester_id: str, course_id: str) -> bool:
        courses = self._courses.get(semester_id, [])
        remaining = [c for c in courses if c.id != course_id]
        if len(remaining) == len(courses):
            return False
        self._courses[semester_id] = remaining
        return True

    # ------------------------
    # Settings
    # ------------------------

    def update_settings(self, scale_type: Optional[str] = None,
                        retake_policy: Optional[str] = None,
                        target_cgpa: Optional[float] = None) -> Settings:
        """
        Changing the scale does not rewrite stored grades;
        call recalculate_all() for that.
        """
        settings = self.settings
        if scale_type is not None:
            settings = settings.with_scale(scale_type)
        if retake_policy is not None:
            settings = settings.with_retake_policy(retake_policy)
        if target_cgpa is not None:
            settings = settings.with_target(target_cgpa)
        self.settings = settings
        return settings

    def recalculate_all(self) -> int:
        """Re-derive every stored grade under the active scale. Returns how many changed."""
        scale = self.settings.grade_mapping
        changed = 0
        for sid, courses in self._courses.items():
            fresh = [recalculate_course(c, scale) for c in courses]
            changed += sum(1 for old, new in zip(courses, fresh) if old != new)
            self._courses[sid] = fresh
        logger.info("Recalculated grades under %s scale: %d course(s) changed",
                    self.settings.scale_type, changed)
        return changed
