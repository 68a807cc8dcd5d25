# frsp_analytics/data_loading.py

import os
import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Tuple

import pandas as pd

from frsp_analytics import config
from frsp_analytics.errors import DataLoadError
from frsp_analytics.models import AttendanceBatch, AttendanceDay, Session, StudentRecord
from frsp_analytics.sections import MappingReport, check_mappings, section_for_batch

logger = logging.getLogger(__name__)

# source field -> StudentRecord field
STUDENT_COLUMNS = {
    "regNo": "registration_number",
    "name": "name",
    "email": "email",
    "year": "year",
    "section": "section",
    "gender": "gender",
    "practical": "practical",
    "theory": "theory",
    "total": "total",
    "hasAssessment": "assessed",
}
TEXT_FIELDS = ["registration_number", "name", "email", "year", "section", "gender"]
SCORE_FIELDS = ["practical", "theory", "total"]


@dataclass(frozen=True)
class Dataset:
    students: Tuple[StudentRecord, ...]
    batches: Dict[str, AttendanceBatch]
    report: MappingReport


def read_json(path: str):
    if not os.path.exists(path):
        raise DataLoadError(f"Data file not found: '{path}'")
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        raise DataLoadError(f"Malformed JSON in '{path}': {exc}") from exc


# -----------------------------------------------------------------------------
# Students
# -----------------------------------------------------------------------------

def _registration_text(value) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    # integer ids come back as floats when the column has gaps
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def clean_students(df: pd.DataFrame) -> pd.DataFrame:
    """
    Basic cleaning of the raw roster frame:
    - Rename source fields, drop everything else.
    - Fill missing text with "" and missing scores with 0.
    - Drop rows without a registration number, then duplicate ids.
    """
    df = df.rename(columns=STUDENT_COLUMNS)
    if "registration_number" not in df.columns:
        raise DataLoadError("Student records have no 'regNo' field")

    df["registration_number"] = df["registration_number"].map(_registration_text)
    for col in TEXT_FIELDS[1:]:
        if col not in df.columns:
            df[col] = ""
        df[col] = df[col].fillna("").astype(str).str.strip()

    for col in SCORE_FIELDS:
        if col not in df.columns:
            df[col] = 0.0
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0).astype(float)

    if "assessed" not in df.columns:
        df["assessed"] = False
    df["assessed"] = df["assessed"].map(lambda v: bool(v) if pd.notna(v) else False)

    n_before = len(df)
    df = df[df["registration_number"] != ""]
    df = df.drop_duplicates(subset=["registration_number"])
    if len(df) < n_before:
        logger.warning(f"Dropped {n_before - len(df)} student rows (blank or duplicate regNo)")

    return df[TEXT_FIELDS + SCORE_FIELDS + ["assessed"]].reset_index(drop=True)


def students_from_frame(df: pd.DataFrame) -> Tuple[StudentRecord, ...]:
    return tuple(
        StudentRecord(
            registration_number=row["registration_number"],
            name=row["name"],
            email=row["email"],
            year=row["year"],
            section=row["section"],
            gender=row["gender"],
            practical=float(row["practical"]),
            theory=float(row["theory"]),
            total=float(row["total"]),
            assessed=bool(row["assessed"]),
        )
        for row in df.to_dict("records")
    )


def load_students(path: str) -> Tuple[StudentRecord, ...]:
    logger.info(f"Loading students from '{path}'...")
    raw = read_json(path)
    if not isinstance(raw, list):
        raise DataLoadError(f"Expected a list of student records in '{path}'")
    if not raw:
        logger.warning(f"No student records in '{path}'")
        return ()

    students = students_from_frame(clean_students(pd.DataFrame(raw)))
    logger.info(f"Loaded {len(students)} students")
    return students


# -----------------------------------------------------------------------------
# Attendance
# -----------------------------------------------------------------------------

def _parse_date(value, label: str) -> date:
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise DataLoadError(f"Bad date {value!r} in batch '{label}'") from exc


def _parse_session(raw: dict) -> Session:
    absent = frozenset(int(roll) for roll in raw.get("absent") or [])
    absent_count = raw.get("absentCount")
    return Session(
        time=str(raw.get("time", "")),
        absent=absent,
        absent_count=int(absent_count) if absent_count is not None else len(absent),
    )


def parse_batch(label: str, raw: dict) -> AttendanceBatch:
    if not isinstance(raw, dict):
        raise DataLoadError(f"Batch '{label}' is not an object")
    days = []
    for raw_day in raw.get("days") or []:
        sessions = tuple(_parse_session(s) for s in raw_day.get("sessions") or [])
        days.append(AttendanceDay(date=_parse_date(raw_day.get("date"), label),
                                  sessions=sessions))
    return AttendanceBatch(label=label, days=tuple(days))


def load_attendance(path: str) -> Dict[str, AttendanceBatch]:
    logger.info(f"Loading attendance from '{path}'...")
    raw = read_json(path)
    if not isinstance(raw, dict):
        raise DataLoadError(f"Expected an object of batches in '{path}'")

    batches = {label: parse_batch(label, data) for label, data in raw.items()}
    n_sessions = sum(b.total_sessions for b in batches.values())
    logger.info(f"Loaded {len(batches)} batches, {n_sessions} sessions")
    return batches


def sessions_frame(batches: Dict[str, AttendanceBatch]) -> pd.DataFrame:
    """One row per session: batch, section, date, time, absent_count."""
    rows = []
    for label, batch in batches.items():
        mapping = section_for_batch(label)
        section = mapping.section if mapping else ""
        for day in batch.days:
            for session in day.sessions:
                rows.append({
                    "batch": label,
                    "section": section,
                    "date": day.date,
                    "time": session.time,
                    "absent_count": session.absent_count,
                })
    return pd.DataFrame(rows, columns=["batch", "section", "date", "time", "absent_count"])


# -----------------------------------------------------------------------------
# Both tables
# -----------------------------------------------------------------------------

def students_path(data_dir: str) -> str:
    path = os.path.join(data_dir, config.STUDENTS_FILE)
    fallback = os.path.join(data_dir, config.STUDENTS_FALLBACK_FILE)
    if not os.path.exists(path) and os.path.exists(fallback):
        return fallback
    return path


def load_dataset(data_dir: str = None) -> Dataset:
    data_dir = data_dir or config.DATA_DIR
    students = load_students(students_path(data_dir))
    batches = load_attendance(os.path.join(data_dir, config.ATTENDANCE_FILE))
    report = check_mappings(students, batches)
    return Dataset(students=students, batches=batches, report=report)
