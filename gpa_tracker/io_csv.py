import logging
import pandas as pd
from typing import List, Tuple

from .course_records import ValidationResult

logger = logging.getLogger(__name__)

# ------------------------
# CSV helpers (course upload)
# ------------------------

def _normalise_cols(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [str(c).strip().lower() for c in df.columns]
    # allow singular / alternative headers
    renames = {"unit": "units", "credits": "units", "credit": "units",
               "course": "code", "letter": "grade"}
    df = df.rename(columns={k: v for k, v in renames.items()
                            if k in df.columns and v not in df.columns})
    return df

def read_csv_upload(uploaded_file) -> pd.DataFrame:
    df = pd.read_csv(uploaded_file)
    return _normalise_cols(df)

def validate_courses_csv(df: pd.DataFrame) -> pd.DataFrame:
    required = {"code", "units"}
    missing = required - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns: {sorted(missing)}. Expected: Code, Units, Score or Grade.")
    if "score" not in df.columns and "grade" not in df.columns:
        raise ValueError("Missing columns: need either Score or Grade.")

    keep = [c for c in ("code", "title", "units", "score", "grade") if c in df.columns]
    out = df[keep].copy()
    out = out.rename(columns={c: c.capitalize() for c in keep})
    return out

def parse_courses(df: pd.DataFrame) -> List[dict]:
    """
    One dict per usable row: code, units, and either score or letter.
    Rows without a code or units are skipped; a numeric score wins over a letter.
    """
    rows = []
    for _, row in df.iterrows():
        code = row.get("Code")
        units = row.get("Units")
        if pd.isna(code) or pd.isna(units):
            continue

        # fractional units are passed through so validation rejects the row
        units = float(units)
        entry = {"code": str(code).strip(),
                 "units": int(units) if units.is_integer() else units}

        title = row.get("Title")
        if title is not None and not pd.isna(title):
            entry["title"] = str(title)

        score = row.get("Score")
        grade = row.get("Grade")
        if score is not None and not pd.isna(score):
            entry["score"] = float(score)
        elif grade is not None and not pd.isna(grade):
            entry["letter"] = str(grade).strip()
        else:
            continue
        rows.append(entry)
    return rows

def import_courses(store, semester_id: str, rows: List[dict]) -> List[Tuple[dict, ValidationResult]]:
    """
    Add parsed rows to one semester of store.
    returns: the rows that were rejected, each with its validation result
    """
    rejected = []
    for entry in rows:
        result, _ = store.add_course(semester_id, **entry)
        if not result.valid:
            rejected.append((entry, result))
    logger.info("Imported %d of %d course row(s) into %s",
                len(rows) - len(rejected), len(rows), semester_id)
    return rejected
