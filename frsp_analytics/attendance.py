# frsp_analytics/attendance.py
"""
Session-level attendance aggregation.

Two rates are derived from the same absentee lists and are deliberately not
interchangeable:

  group/day view    mean over sessions of (N - absent) / N
  per-student view  present sessions / total sessions

Nothing here mutates its inputs; every function is safe to call repeatedly.
"""

import math
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from frsp_analytics.models import AttendanceBatch, AttendanceDay, StudentRecord
from frsp_analytics.sections import BATCH_SECTIONS, resolve_roll

logger = logging.getLogger(__name__)

# A student with no recorded sessions counts as fully present.
VACUOUS_ATTENDANCE_RATE = 100.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# -----------------------------------------------------------------------------
# 1) GROUP-DAY MODE
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SessionAttendance:
    time: str
    present: int
    absent: int


@dataclass(frozen=True)
class DayAttendance:
    date: date
    attendance: float
    avg_absent: float
    absent: int
    sessions: int
    # one entry per session, in sheet order
    session_breakdown: Tuple[SessionAttendance, ...] = ()


def session_breakdown(day: AttendanceDay, student_count: int) -> Tuple[SessionAttendance, ...]:
    """Present/absent head count for each session of `day`; present never drops below 0."""
    return tuple(
        SessionAttendance(time=s.time,
                          present=max(student_count - s.absent_count, 0),
                          absent=s.absent_count)
        for s in day.sessions
    )


def day_attendance(day: AttendanceDay, student_count: int) -> DayAttendance:
    n_sessions = len(day.sessions)
    breakdown = session_breakdown(day, student_count)
    if n_sessions == 0 or student_count <= 0:
        return DayAttendance(date=day.date, attendance=0.0, avg_absent=0.0,
                             absent=0, sessions=n_sessions, session_breakdown=breakdown)

    avg_absent = sum(s.absent_count for s in day.sessions) / n_sessions
    attendance = (student_count - avg_absent) / student_count * 100
    return DayAttendance(
        date=day.date,
        attendance=float(attendance),
        avg_absent=float(avg_absent),
        absent=round_half_up(avg_absent),
        sessions=n_sessions,
        session_breakdown=breakdown,
    )


def daily_attendance(days: Sequence[AttendanceDay], student_count: int) -> List[DayAttendance]:
    """
    One record per day for a group of `student_count` students.
    A day with no sessions, or a group of 0 students, yields 0%; the caller
    decides how to present that ("no data").
    """
    return [day_attendance(day, student_count) for day in days]


def mean_attendance(day_stats: Sequence[DayAttendance]) -> float:
    if not day_stats:
        return 0.0
    return sum(d.attendance for d in day_stats) / len(day_stats)


# -----------------------------------------------------------------------------
# 2) PER-STUDENT MODE
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DayPresence:
    date: date
    present: int
    absent: int
    total: int


@dataclass(frozen=True)
class StudentAttendance:
    roll: int
    total_sessions: int
    present_sessions: int
    absent_sessions: int
    attendance_rate: float
    days: Tuple[DayPresence, ...] = ()


def student_attendance(days: Sequence[AttendanceDay], roll: int) -> StudentAttendance:
    total_sessions = 0
    absent_sessions = 0
    per_day = []

    for day in days:
        day_total = len(day.sessions)
        day_absent = sum(1 for s in day.sessions if roll in s.absent)
        per_day.append(DayPresence(date=day.date, present=day_total - day_absent,
                                   absent=day_absent, total=day_total))
        total_sessions += day_total
        absent_sessions += day_absent

    present_sessions = total_sessions - absent_sessions
    if total_sessions > 0:
        rate = present_sessions / total_sessions * 100
    else:
        rate = VACUOUS_ATTENDANCE_RATE

    return StudentAttendance(
        roll=roll,
        total_sessions=total_sessions,
        present_sessions=present_sessions,
        absent_sessions=absent_sessions,
        attendance_rate=float(rate),
        days=tuple(per_day),
    )


# -----------------------------------------------------------------------------
# 3) SECTION / YEAR / OVERALL SUMMARIES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SectionAttendance:
    section: str
    year: str
    batch: str
    total_students: int
    avg_attendance: float
    days_tracked: int
    daily: Tuple[DayAttendance, ...] = ()


def section_attendance(batch: AttendanceBatch, roster: Sequence[StudentRecord]) -> SectionAttendance:
    """Group-day series for a mapped batch, using the section roster size as N."""
    mapping = BATCH_SECTIONS.get(batch.label)
    daily = daily_attendance(batch.days, len(roster))
    return SectionAttendance(
        section=mapping.section if mapping else "",
        year=mapping.year if mapping else "",
        batch=batch.label,
        total_students=len(roster),
        avg_attendance=mean_attendance(daily),
        days_tracked=len(daily),
        daily=tuple(daily),
    )


@dataclass(frozen=True)
class StudentAttendanceRow:
    student: StudentRecord
    attendance: StudentAttendance


def student_attendance_table(batch: AttendanceBatch,
                             roster: Iterable[StudentRecord]) -> List[StudentAttendanceRow]:
    """Per-student rows for the detailed view, ordered by registration number."""
    rows = []
    for student in sorted(roster, key=lambda s: s.registration_number):
        roll = resolve_roll(student.registration_number, student.section)
        rows.append(StudentAttendanceRow(student=student,
                                         attendance=student_attendance(batch.days, roll)))
    return rows


def mapped_batches(batches: Dict[str, AttendanceBatch], year: Optional[str] = None):
    """(label, mapping, batch) for each mapped batch present in the data, in table order."""
    for label, mapping in BATCH_SECTIONS.items():
        if year and mapping.year != year:
            continue
        batch = batches.get(label)
        if batch is None:
            continue
        yield label, mapping, batch


def pooled_attendance(batches: Dict[str, AttendanceBatch],
                      students: Sequence[StudentRecord],
                      year: Optional[str] = None) -> Tuple[float, int]:
    """
    Day-weighted mean attendance across mapped sections (optionally one year).
    Returns (avg_attendance, days_counted); (0.0, 0) when nothing is tracked.
    """
    total = 0.0
    n_days = 0
    for _, mapping, batch in mapped_batches(batches, year):
        roster_size = sum(1 for s in students if s.section == mapping.section)
        if roster_size == 0:
            logger.debug(f"Batch '{batch.label}' has no roster; skipped in pooled average")
            continue
        for day in daily_attendance(batch.days, roster_size):
            total += day.attendance
            n_days += 1

    if n_days == 0:
        return 0.0, 0
    return total / n_days, n_days


@dataclass(frozen=True)
class YearAttendance:
    year: str
    total_students: int
    sections: int
    sections_with_data: int
    avg_attendance: float

    @property
    def has_data(self) -> bool:
        return self.sections_with_data > 0


def year_attendance(year: str, students: Sequence[StudentRecord],
                    batches: Dict[str, AttendanceBatch]) -> YearAttendance:
    year_students = [s for s in students if s.year == year]
    year_sections = {s.section for s in year_students}
    tracked = {m.section for _, m, _ in mapped_batches(batches, year)}
    avg, _ = pooled_attendance(batches, students, year)
    return YearAttendance(
        year=year,
        total_students=len(year_students),
        sections=len(year_sections),
        sections_with_data=len(year_sections & tracked),
        avg_attendance=avg,
    )
