"""GPA / CGPA tracking and planning."""

__version__ = "1.0.0"

from .grade_scale import (
    GradePoint,
    SCALE_4_0,
    SCALE_5_0,
    get_scale,
    resolve_grade,
    scale_max,
    score_for_letter,
)
from .course_records import (
    Course,
    Semester,
    ValidationResult,
    has_duplicate_course_code,
    new_course,
    new_course_from_letter,
    new_semester,
    quality_points,
    recalculate_course,
    update_course,
    validate_course,
    validate_semester,
)
from .backend_logic import (
    cgpa,
    is_achievable,
    project_cgpa,
    required_gpa,
    round_2dp_half_up,
    semester_gpa,
    totals,
)
from .retakes import KEEP_BOTH, REPLACE, apply_retake_policy, identify_retakes
from .settings import Settings
from .store import GradebookStore
