# frsp_analytics/views.py
"""
Year/section selection and the page views built from it.

`Selection` is the only state; every builder is a pure function of the two
input tables plus a selection, so the same arguments always give equal
results.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from frsp_analytics import assessment, attendance, correlation
from frsp_analytics.errors import SelectionError
from frsp_analytics.models import AttendanceBatch, StudentRecord
from frsp_analytics.sections import batch_for_section, has_attendance_data

logger = logging.getLogger(__name__)

NO_SELECTION = "no-selection"
YEAR_SELECTED = "year-selected"
SECTION_SELECTED = "year+section-selected"


# -----------------------------------------------------------------------------
# 1) SELECTION STATE
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Selection:
    year: str = ""
    section: str = ""

    def __post_init__(self):
        if self.section and not self.year:
            raise SelectionError(f"Section {self.section!r} selected without a year")

    @property
    def state(self) -> str:
        if self.section:
            return SECTION_SELECTED
        if self.year:
            return YEAR_SELECTED
        return NO_SELECTION

    def select_year(self, year: str) -> "Selection":
        """Choosing a year (or "" for all years) always clears the section."""
        return Selection(year=year or "")

    def select_section(self, section: str) -> "Selection":
        if not self.year:
            raise SelectionError("Select a year before selecting a section")
        return Selection(year=self.year, section=section or "")

    def clear(self) -> "Selection":
        return Selection()


def available_years(students: Sequence[StudentRecord]) -> List[str]:
    return sorted({s.year for s in students if s.year})


def available_sections(students: Sequence[StudentRecord], year: str = "") -> List[str]:
    return sorted({s.section for s in students
                   if s.section and (not year or s.year == year)})


def filter_students(students: Sequence[StudentRecord], selection: Selection) -> List[StudentRecord]:
    if selection.section:
        return [s for s in students if s.section == selection.section]
    if selection.year:
        return [s for s in students if s.year == selection.year]
    return list(students)


# -----------------------------------------------------------------------------
# 2) ASSESSMENT VIEW
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AssessmentView:
    selection: Selection
    total_students: int
    assessed_count: int
    coverage: float
    stats: assessment.AssessmentStats
    year_summaries: Tuple[assessment.GroupSummary, ...] = ()
    section_summaries: Tuple[assessment.GroupSummary, ...] = ()
    top_performers: Tuple[StudentRecord, ...] = ()
    roster: Tuple[StudentRecord, ...] = ()


def build_assessment_view(students: Sequence[StudentRecord], selection: Selection,
                          sort_by: str = "regNo", descending: bool = False) -> AssessmentView:
    """
    no-selection          stats over everyone + per-year summaries
    year-selected         stats over the year + per-section summaries
    year+section-selected stats over the section + top 5 + sorted roster
    """
    subset = filter_students(students, selection)
    stats = assessment.aggregate(subset)
    logger.debug(f"Assessment view {selection.state}: {len(subset)} students, {stats.count} assessed")

    years = sections = top = roster = ()
    if selection.state == NO_SELECTION:
        years = tuple(assessment.year_summaries(students))
    elif selection.state == YEAR_SELECTED:
        sections = tuple(assessment.section_summaries(students, selection.year))
    else:
        top = tuple(assessment.top_performers(subset))
        roster = tuple(assessment.sort_roster(subset, sort_by, descending))

    return AssessmentView(
        selection=selection,
        total_students=len(subset),
        assessed_count=stats.count,
        coverage=assessment.coverage(stats.count, len(subset)),
        stats=stats,
        year_summaries=years,
        section_summaries=sections,
        top_performers=top,
        roster=roster,
    )


# -----------------------------------------------------------------------------
# 3) ATTENDANCE VIEW
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SectionAttendanceSummary:
    section: str
    total_students: int
    has_data: bool
    avg_attendance: float = 0.0
    days: int = 0


@dataclass(frozen=True)
class AttendanceView:
    selection: Selection
    total_students: int
    # None means "no data" (section without an attendance batch)
    avg_attendance: Optional[float]
    days_tracked: int
    total_sessions: int
    batch: Optional[str] = None
    daily: Tuple[attendance.DayAttendance, ...] = ()
    year_summaries: Tuple[attendance.YearAttendance, ...] = ()
    section_summaries: Tuple[SectionAttendanceSummary, ...] = ()
    students: Tuple[attendance.StudentAttendanceRow, ...] = ()


def _section_summaries(students, batches, year) -> List[SectionAttendanceSummary]:
    summaries = []
    for section in available_sections(students, year):
        roster = [s for s in students if s.section == section]
        batch = None
        if has_attendance_data(section, year):
            batch = batches.get(batch_for_section(section, year))
        if batch is None or not roster:
            summaries.append(SectionAttendanceSummary(section=section,
                                                      total_students=len(roster),
                                                      has_data=False))
            continue
        stats = attendance.section_attendance(batch, roster)
        summaries.append(SectionAttendanceSummary(
            section=section,
            total_students=len(roster),
            has_data=True,
            avg_attendance=stats.avg_attendance,
            days=stats.days_tracked,
        ))
    return summaries


def build_attendance_view(students: Sequence[StudentRecord],
                          batches: Dict[str, AttendanceBatch],
                          selection: Selection) -> AttendanceView:
    subset = filter_students(students, selection)

    if selection.state == SECTION_SELECTED:
        label = batch_for_section(selection.section, selection.year)
        batch = batches.get(label) if label else None
        if batch is None or not subset:
            logger.debug(f"No attendance data for section {selection.section!r}")
            return AttendanceView(selection=selection, total_students=len(subset),
                                  avg_attendance=None, days_tracked=0, total_sessions=0)

        stats = attendance.section_attendance(batch, subset)
        return AttendanceView(
            selection=selection,
            total_students=len(subset),
            avg_attendance=stats.avg_attendance,
            days_tracked=stats.days_tracked,
            total_sessions=batch.total_sessions,
            batch=label,
            daily=stats.daily,
            students=tuple(attendance.student_attendance_table(batch, subset)),
        )

    year = selection.year or None
    avg, n_days = attendance.pooled_attendance(batches, students, year)
    n_sessions = sum(b.total_sessions for _, _, b in attendance.mapped_batches(batches, year))

    if selection.state == YEAR_SELECTED:
        return AttendanceView(
            selection=selection,
            total_students=len(subset),
            avg_attendance=avg if n_days else None,
            days_tracked=n_days,
            total_sessions=n_sessions,
            section_summaries=tuple(_section_summaries(students, batches, selection.year)),
        )

    return AttendanceView(
        selection=selection,
        total_students=len(subset),
        avg_attendance=avg if n_days else None,
        days_tracked=n_days,
        total_sessions=n_sessions,
        year_summaries=tuple(attendance.year_attendance(y, students, batches)
                             for y in available_years(students)),
    )


# -----------------------------------------------------------------------------
# 4) OVERVIEW DASHBOARD
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class BatchDay:
    batch: str
    section: str
    day: attendance.DayAttendance


@dataclass(frozen=True)
class DashboardView:
    total_students: int
    avg_attendance: float
    assessment_stats: assessment.AssessmentStats
    sections: Tuple[attendance.SectionAttendance, ...]
    daily: Tuple[BatchDay, ...]
    correlation_result: correlation.CorrelationResult
    score_by_attendance: Tuple[correlation.BandScore, ...]
    trend: Optional[correlation.TrendLine] = None
    sections_without_data: Tuple[str, ...] = ()


def build_dashboard_view(students: Sequence[StudentRecord],
                         batches: Dict[str, AttendanceBatch]) -> DashboardView:
    sections = []
    for _, mapping, batch in attendance.mapped_batches(batches):
        roster = [s for s in students if s.section == mapping.section]
        if not roster:
            continue
        sections.append(attendance.section_attendance(batch, roster))

    # mean of per-section averages
    avg = sum(s.avg_attendance for s in sections) / len(sections) if sections else 0.0

    daily = sorted(
        (BatchDay(batch=s.batch, section=s.section, day=d) for s in sections for d in s.daily),
        key=lambda bd: (bd.day.date, bd.batch),
    )

    corr = correlation.correlate(students, batches)
    tracked = {s.section for s in sections}
    untracked = tuple(sec for sec in available_sections(students) if sec not in tracked)

    return DashboardView(
        total_students=len(students),
        avg_attendance=float(avg),
        assessment_stats=assessment.aggregate(students),
        sections=tuple(sections),
        daily=tuple(daily),
        correlation_result=corr,
        score_by_attendance=tuple(correlation.score_by_attendance_band(corr.pairs)),
        trend=correlation.attendance_trend(corr.pairs),
        sections_without_data=untracked,
    )
