from dataclasses import dataclass
from typing import List, Optional, Tuple

# ------------------------
# Grade bands
# ------------------------

@dataclass(frozen=True)
class GradePoint:
    letter: str
    min_score: float
    max_score: float
    point: float


# Nigerian 5.0 scale (default)
SCALE_5_0: Tuple[GradePoint, ...] = (
    GradePoint("A", 70, 100, 5.0),
    GradePoint("B", 60, 69, 4.0),
    GradePoint("C", 50, 59, 3.0),
    GradePoint("D", 45, 49, 2.0),
    GradePoint("E", 40, 44, 1.0),
    GradePoint("F", 0, 39, 0.0),
)

SCALE_4_0: Tuple[GradePoint, ...] = (
    GradePoint("A", 90, 100, 4.0),
    GradePoint("B", 80, 89, 3.0),
    GradePoint("C", 70, 79, 2.0),
    GradePoint("D", 60, 69, 1.0),
    GradePoint("F", 0, 59, 0.0),
)

SCALES = {
    "5.0": SCALE_5_0,
    "4.0": SCALE_4_0,
}

SCALE_TYPES = tuple(SCALES.keys())

FALLBACK_GRADE = ("F", 0.0)


def get_scale(scale_type: str) -> Tuple[GradePoint, ...]:
    if scale_type not in SCALES:
        raise ValueError(f"scale_type must be one of {list(SCALE_TYPES)} (got {scale_type!r})")
    return SCALES[scale_type]


def band_covers(band: GradePoint, score: float, scale) -> bool:
    """
    Bands are written with whole-number bounds (60-69, 70-100). A fractional
    score above max_score but below the next band's floor (69.5) belongs to
    the lower band; with no band starting at max_score + 1 the gap stays open.
    """
    if band.min_score <= score <= band.max_score:
        return True
    next_floor = band.max_score + 1
    return (band.max_score < score < next_floor
            and any(other.min_score == next_floor for other in scale))


def resolve_grade(score: float, scale) -> dict:
    """
    score: numeric score, normally 0-100 (not range-checked here)
    scale: ordered sequence of GradePoint
    returns: {"letter": str, "point": float} for the first band covering score,
             or F / 0.0 when nothing matches (gappy or malformed scale)
    """
    for band in scale:
        if band_covers(band, score, scale):
            return {"letter": band.letter, "point": band.point}
    letter, point = FALLBACK_GRADE
    return {"letter": letter, "point": point}


def score_for_letter(letter: str, scale) -> Optional[float]:
    """Representative score for a letter grade: the floor of its band."""
    for band in scale:
        if band.letter == letter.strip().upper():
            return band.min_score
    return None


def scale_max(scale) -> float:
    if not scale:
        return 0.0
    return max(band.point for band in scale)


def scale_letters(scale) -> List[str]:
    return [band.letter for band in scale]
