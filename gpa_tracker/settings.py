"""
Per-user settings and the configuration constants that go with them.
"""

from dataclasses import dataclass, field, replace
from typing import Tuple

from .grade_scale import GradePoint, SCALE_TYPES, get_scale, scale_max
from .retakes import REPLACE, RETAKE_POLICIES

DEFAULT_SCALE_TYPE = "5.0"
DEFAULT_RETAKE_POLICY = REPLACE
DEFAULT_TARGET_CGPA = 4.0

# Courses with at least this many units and at most this grade point are
# flagged on the semester report.
IMPACTFUL_MIN_UNITS = 3
IMPACTFUL_MAX_POINT = 2.0


@dataclass(frozen=True)
class Settings:
    scale_type: str = DEFAULT_SCALE_TYPE
    grade_mapping: Tuple[GradePoint, ...] = field(default_factory=lambda: get_scale(DEFAULT_SCALE_TYPE))
    retake_policy: str = DEFAULT_RETAKE_POLICY
    target_cgpa: float = DEFAULT_TARGET_CGPA

    def __post_init__(self):
        if self.scale_type not in SCALE_TYPES:
            raise ValueError(f"scale_type must be one of {list(SCALE_TYPES)} (got {self.scale_type!r})")
        if self.retake_policy not in RETAKE_POLICIES:
            raise ValueError(f"retake_policy must be one of {list(RETAKE_POLICIES)} (got {self.retake_policy!r})")
        # grade_mapping always follows scale_type
        object.__setattr__(self, "grade_mapping", get_scale(self.scale_type))

    @property
    def max_gpa(self) -> float:
        return scale_max(self.grade_mapping)

    def with_scale(self, scale_type: str) -> "Settings":
        return replace(self, scale_type=scale_type)

    def with_retake_policy(self, policy: str) -> "Settings":
        return replace(self, retake_policy=policy)

    def with_target(self, target_cgpa: float) -> "Settings":
        return replace(self, target_cgpa=float(target_cgpa))


def default_settings() -> Settings:
    return Settings()
