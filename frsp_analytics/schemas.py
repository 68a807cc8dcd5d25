# frsp_analytics/schemas.py

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, computed_field

from frsp_analytics.assessment import score_band


class Schema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class SelectionOut(Schema):
    year: str
    section: str
    state: str


class SelectionOptions(Schema):
    years: List[str]
    sections: List[str]


class StudentOut(Schema):
    registration_number: str
    name: str
    year: str
    section: str
    gender: str
    practical: float
    theory: float
    total: float
    assessed: bool

    @computed_field
    @property
    def band(self) -> Optional[str]:
        """high / pass / low for assessed students, None otherwise."""
        return score_band(self.total) if self.assessed else None


# -----------------------------------------------------------------------------
# Assessment
# -----------------------------------------------------------------------------

class ScoreBucketOut(Schema):
    range: str
    count: int


class AssessmentStatsOut(Schema):
    count: int
    avg_total: float
    avg_practical: float
    avg_theory: float
    highest: float
    pass_rate: float
    histogram: List[ScoreBucketOut]


class GroupSummaryOut(Schema):
    key: str
    year: str
    total: int
    assessed: int
    avg_score: float
    coverage: float


class AssessmentViewOut(Schema):
    selection: SelectionOut
    total_students: int
    assessed_count: int
    coverage: float
    stats: AssessmentStatsOut
    year_summaries: List[GroupSummaryOut]
    section_summaries: List[GroupSummaryOut]
    top_performers: List[StudentOut]
    roster: List[StudentOut]


# -----------------------------------------------------------------------------
# Attendance
# -----------------------------------------------------------------------------

class SessionAttendanceOut(Schema):
    time: str
    present: int
    absent: int


class DayAttendanceOut(Schema):
    date: date
    attendance: float
    avg_absent: float
    absent: int
    sessions: int
    session_breakdown: List[SessionAttendanceOut]


class DayPresenceOut(Schema):
    date: date
    present: int
    absent: int
    total: int


class StudentAttendanceOut(Schema):
    roll: int
    total_sessions: int
    present_sessions: int
    absent_sessions: int
    attendance_rate: float
    days: List[DayPresenceOut]


class StudentAttendanceRowOut(Schema):
    student: StudentOut
    attendance: StudentAttendanceOut


class YearAttendanceOut(Schema):
    year: str
    total_students: int
    sections: int
    sections_with_data: int
    avg_attendance: float
    has_data: bool


class SectionAttendanceSummaryOut(Schema):
    section: str
    total_students: int
    has_data: bool
    avg_attendance: float
    days: int


class AttendanceViewOut(Schema):
    selection: SelectionOut
    total_students: int
    avg_attendance: Optional[float]
    days_tracked: int
    total_sessions: int
    batch: Optional[str]
    daily: List[DayAttendanceOut]
    year_summaries: List[YearAttendanceOut]
    section_summaries: List[SectionAttendanceSummaryOut]
    students: List[StudentAttendanceRowOut]


# -----------------------------------------------------------------------------
# Correlation / dashboard
# -----------------------------------------------------------------------------

class CorrelationPointOut(Schema):
    name: str
    registration_number: str
    attendance_rate: float
    score: float
    section: str


class BandScoreOut(Schema):
    range: str
    avg_score: float
    count: int


class TrendLineOut(Schema):
    slope: float
    intercept: float
    r_squared: float
    p_value: float
    n: int


class CorrelationResultOut(Schema):
    pairs: List[CorrelationPointOut]
    correlation: float


class CorrelationOut(CorrelationResultOut):
    score_by_attendance: List[BandScoreOut]
    trend: Optional[TrendLineOut]


class SectionAttendanceOut(Schema):
    section: str
    year: str
    batch: str
    total_students: int
    avg_attendance: float
    days_tracked: int


class BatchDayOut(Schema):
    batch: str
    section: str
    day: DayAttendanceOut


class DashboardOut(Schema):
    total_students: int
    avg_attendance: float
    assessment_stats: AssessmentStatsOut
    sections: List[SectionAttendanceOut]
    daily: List[BatchDayOut]
    correlation_result: CorrelationResultOut
    score_by_attendance: List[BandScoreOut]
    trend: Optional[TrendLineOut]
    sections_without_data: List[str]
