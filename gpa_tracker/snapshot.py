"""
Versioned JSON export/import of a whole gradebook.

Layout (version "1.0"):

    {
      "version": "1.0",
      "exportDate": "2024-05-01T12:00:00+00:00",
      "semesters": [{"id", "session", "term", "level", "createdAt"}],
      "coursesBySemester": {semester_id: [{"id", "code", "title", "units",
                            "score", "gradeLetter", "gradePoint", "createdAt"}]},
      "settings": {"scaleType", "gradeMapping", "retakePolicy", "targetCgpa"}
    }

Stored grade letters/points are kept as exported; they are not re-derived on
import.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from .course_records import Course, Semester, validate_course, validate_semester
from .settings import Settings
from .store import GradebookStore

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0"
SUPPORTED_VERSIONS = {"1.0"}


def _semester_to_dict(s: Semester) -> dict:
    return {"id": s.id, "session": s.session, "term": s.term,
            "level": s.level, "createdAt": s.created_at}


def _course_to_dict(c: Course) -> dict:
    return {"id": c.id, "code": c.code, "title": c.title, "units": c.units,
            "score": c.score, "gradeLetter": c.grade_letter,
            "gradePoint": c.grade_point, "createdAt": c.created_at}


def _settings_to_dict(s: Settings) -> dict:
    return {
        "scaleType": s.scale_type,
        "gradeMapping": [
            {"letter": g.letter, "minScore": g.min_score,
             "maxScore": g.max_score, "point": g.point}
            for g in s.grade_mapping
        ],
        "retakePolicy": s.retake_policy,
        "targetCgpa": s.target_cgpa,
    }


def export_snapshot(store: GradebookStore, export_date: Optional[datetime] = None) -> dict:
    export_date = export_date or datetime.now(timezone.utc)
    return {
        "version": SNAPSHOT_VERSION,
        "exportDate": export_date.isoformat(),
        "semesters": [_semester_to_dict(s) for s in store.semesters],
        "coursesBySemester": {
            sid: [_course_to_dict(c) for c in courses]
            for sid, courses in store.courses_by_semester.items()
        },
        "settings": _settings_to_dict(store.settings),
    }


def dumps_snapshot(store: GradebookStore, export_date: Optional[datetime] = None) -> str:
    return json.dumps(export_snapshot(store, export_date), indent=2)


# ------------------------
# Import
# ------------------------

def _semester_from_dict(d: dict) -> Semester:
    result = validate_semester(d["session"], int(d["term"]), int(d["level"]))
    if not result.valid:
        raise ValueError(f"Semester {d.get('id')!r}: {result.error}")
    return Semester(id=str(d["id"]), session=d["session"], term=int(d["term"]),
                    level=int(d["level"]), created_at=int(d["createdAt"]))


def _course_from_dict(d: dict) -> Course:
    result = validate_course(d["code"], d["units"], d["score"])
    if not result.valid:
        raise ValueError(f"Course {d.get('id')!r}: {result.error}")
    return Course(
        id=str(d["id"]),
        code=d["code"],
        title=d.get("title"),
        units=int(d["units"]),
        score=float(d["score"]),
        grade_letter=d.get("gradeLetter") or "F",
        grade_point=float(d["gradePoint"]),
        created_at=int(d["createdAt"]),
    )


def _settings_from_dict(d: dict) -> Settings:
    # gradeMapping is not read back: it always follows scaleType
    return Settings(scale_type=d["scaleType"], retake_policy=d["retakePolicy"],
                    target_cgpa=float(d["targetCgpa"]))


def load_snapshot(data: dict) -> GradebookStore:
    """Build a fresh store from exported data. Raises ValueError on bad input."""
    if not isinstance(data, dict):
        raise ValueError("Invalid export file format")
    missing = {"semesters", "coursesBySemester", "settings"} - set(data)
    if missing:
        raise ValueError(f"Invalid export file format: missing {sorted(missing)}")

    version = data.get("version", SNAPSHOT_VERSION)
    if version not in SUPPORTED_VERSIONS:
        raise ValueError(f"Unsupported export version: {version!r}")

    try:
        semesters = [_semester_from_dict(s) for s in data["semesters"]]
        courses = {
            str(sid): [_course_from_dict(c) for c in cs]
            for sid, cs in data["coursesBySemester"].items()
        }
        settings = _settings_from_dict(data["settings"])
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Invalid export file format: {e}") from e

    store = GradebookStore(semesters=semesters, courses_by_semester=courses, settings=settings)
    logger.info("Loaded snapshot v%s: %d semester(s), %d course(s)",
                version, len(semesters), len(store.all_courses()))
    return store


def loads_snapshot(text: str) -> GradebookStore:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError("Failed to parse import file") from e
    return load_snapshot(data)
