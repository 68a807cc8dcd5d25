import json
from datetime import date

import pandas as pd
import pytest

from frsp_analytics.data_loading import clean_students, parse_batch, students_from_frame
from frsp_analytics.models import AttendanceDay, Session, StudentRecord

RAW_STUDENTS = [
    {"name": "Asha", "regNo": "2510101", "email": "a@x.in", "year": "1st Year",
     "section": "1BCOM A", "gender": "F", "practical": 20, "theory": 25, "total": 45,
     "hasAssessment": True},
    {"name": "Bala", "regNo": "2510102", "email": "", "year": "1st Year",
     "section": "1BCOM A", "gender": "M", "practical": 10, "theory": 12, "total": 22,
     "hasAssessment": True},
    {"name": "", "regNo": "2510103", "email": "", "year": "1st Year",
     "section": "1BCOM A", "gender": "M", "practical": 0, "theory": 0, "total": 0,
     "hasAssessment": False},
    {"name": "Chitra", "regNo": "2510201", "email": "", "year": "1st Year",
     "section": "1BCOM B", "gender": "F", "practical": 8, "theory": 10, "total": 18,
     "hasAssessment": True},
    {"name": "Dev", "regNo": "2511501", "email": "", "year": "2nd Year",
     "section": "1BCOMSF", "gender": "M", "practical": 15, "theory": 20, "total": 35,
     "hasAssessment": True},
    {"name": "Esha", "regNo": "2520101", "email": "", "year": "2nd Year",
     "section": "1BBA A", "gender": "F", "practical": 5, "theory": 3, "total": 8,
     "hasAssessment": True},
]

RAW_ATTENDANCE = {
    "2 BCOM A": {"batch": "2 BCOM A", "days": [
        {"date": "2025-01-20", "sessions": [
            {"time": "07:00", "absent": [1], "absentCount": 1},
            {"time": "07:50", "absent": [], "absentCount": 0},
        ]},
    ]},
    "2 BCOM B": {"batch": "2 BCOM B", "days": [
        {"date": "2025-01-20", "sessions": [
            {"time": "07:00", "absent": [1], "absentCount": 1},
            {"time": "07:50", "absent": [1], "absentCount": 1},
        ]},
        {"date": "2025-01-21", "sessions": [
            {"time": "07:00", "absent": [], "absentCount": 0},
        ]},
    ]},
    "4 BCOM F": {"batch": "4 BCOM F", "days": [
        {"date": "2025-01-27", "sessions": [
            {"time": "07:00", "absent": [], "absentCount": 0},
            {"time": "07:50", "absent": [], "absentCount": 0},
        ]},
    ]},
    "9 BCOM Z": {"batch": "9 BCOM Z", "days": [
        {"date": "2025-01-27", "sessions": [
            {"time": "07:00", "absent": [3], "absentCount": 1},
        ]},
    ]},
}


def make_student(reg_no, section="1BCOM A", year="1st Year", total=0.0,
                 practical=0.0, theory=0.0, assessed=None, name=""):
    if assessed is None:
        assessed = total > 0
    return StudentRecord(registration_number=reg_no, name=name, year=year, section=section,
                         practical=practical, theory=theory, total=total, assessed=assessed)


def make_day(iso_date, *absent_lists):
    sessions = tuple(
        Session(time=f"S{i}", absent=frozenset(absent), absent_count=len(absent))
        for i, absent in enumerate(absent_lists, start=1)
    )
    return AttendanceDay(date=date.fromisoformat(iso_date), sessions=sessions)


@pytest.fixture
def students():
    return students_from_frame(clean_students(pd.DataFrame(RAW_STUDENTS)))


@pytest.fixture
def batches():
    return {label: parse_batch(label, raw) for label, raw in RAW_ATTENDANCE.items()}


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / "students.json").write_text(json.dumps(RAW_STUDENTS), encoding="utf-8")
    (tmp_path / "attendance.json").write_text(json.dumps(RAW_ATTENDANCE), encoding="utf-8")
    return tmp_path
