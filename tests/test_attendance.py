from datetime import date

import pytest

from conftest import make_day, make_student
from frsp_analytics.attendance import (
    VACUOUS_ATTENDANCE_RATE,
    SessionAttendance,
    daily_attendance,
    mean_attendance,
    pooled_attendance,
    section_attendance,
    student_attendance,
    student_attendance_table,
    year_attendance,
)
from frsp_analytics.models import AttendanceBatch, AttendanceDay


# -----------------------------------------------------------------------------
# Group-day mode
# -----------------------------------------------------------------------------

def test_no_absentees_is_full_attendance():
    days = [make_day("2025-01-20", [], [], []), make_day("2025-01-21", [], [])]
    stats = daily_attendance(days, 40)
    assert [d.attendance for d in stats] == [100.0, 100.0]
    assert all(d.absent == 0 for d in stats)


def test_day_uses_mean_absent_per_session():
    day = make_day("2025-01-20", [1, 2, 3], [1], [])   # 4 absences over 3 sessions
    [stats] = daily_attendance([day], 10)
    assert stats.avg_absent == pytest.approx(4 / 3)
    assert stats.attendance == pytest.approx((10 - 4 / 3) / 10 * 100)
    assert stats.absent == 1
    assert stats.sessions == 3


def test_absent_rounds_half_up():
    day = make_day("2025-01-20", [1], [])
    [stats] = daily_attendance([day], 10)
    assert stats.avg_absent == 0.5
    assert stats.absent == 1


def test_zero_students_or_sessions_do_not_divide_by_zero():
    empty_day = AttendanceDay(date=date(2025, 1, 20), sessions=())
    assert daily_attendance([empty_day], 30)[0].attendance == 0.0
    assert daily_attendance([make_day("2025-01-20", [1])], 0)[0].attendance == 0.0


def test_day_lists_each_session_head_count():
    day = make_day("2025-01-20", [1, 2, 3], [1], [])
    [stats] = daily_attendance([day], 10)
    assert stats.session_breakdown == (
        SessionAttendance(time="S1", present=7, absent=3),
        SessionAttendance(time="S2", present=9, absent=1),
        SessionAttendance(time="S3", present=10, absent=0),
    )


def test_session_head_count_never_negative():
    [stats] = daily_attendance([make_day("2025-01-20", [1, 2])], 0)
    assert stats.session_breakdown == (SessionAttendance(time="S1", present=0, absent=2),)
    empty_day = AttendanceDay(date=date(2025, 1, 20), sessions=())
    assert daily_attendance([empty_day], 30)[0].session_breakdown == ()


def test_mean_attendance_of_nothing_is_zero():
    assert mean_attendance([]) == 0.0


# -----------------------------------------------------------------------------
# Per-student mode
# -----------------------------------------------------------------------------

def test_three_student_scenario():
    days = [make_day("2025-01-20", [1], [])]

    first = student_attendance(days, 1)
    assert first.total_sessions == 2
    assert first.absent_sessions == 1
    assert first.present_sessions == 1
    assert first.attendance_rate == 50.0

    for roll in (2, 3):
        assert student_attendance(days, roll).attendance_rate == 100.0


def test_per_day_breakdown():
    days = [make_day("2025-01-20", [4], [4], []), make_day("2025-01-21", [], [4])]
    result = student_attendance(days, 4)

    assert [(d.present, d.absent, d.total) for d in result.days] == [(1, 2, 3), (1, 1, 2)]
    assert result.attendance_rate == pytest.approx(2 / 5 * 100)


def test_no_sessions_is_vacuously_present():
    result = student_attendance([], 7)
    assert result.total_sessions == 0
    assert result.attendance_rate == VACUOUS_ATTENDANCE_RATE == 100.0


def test_invalid_roll_is_never_absent():
    days = [make_day("2025-01-20", [1, 2], [3])]
    assert student_attendance(days, 0).attendance_rate == 100.0


def test_aggregators_are_idempotent_and_leave_input_alone():
    days = (make_day("2025-01-20", [1], [2, 3]), make_day("2025-01-21", []))
    snapshot = repr(days)

    assert daily_attendance(days, 5) == daily_attendance(days, 5)
    assert student_attendance(days, 2) == student_attendance(days, 2)
    assert repr(days) == snapshot


# -----------------------------------------------------------------------------
# Section / year summaries
# -----------------------------------------------------------------------------

def test_section_attendance(students, batches):
    roster = [s for s in students if s.section == "1BCOM A"]
    stats = section_attendance(batches["2 BCOM A"], roster)

    assert stats.section == "1BCOM A"
    assert stats.year == "1st Year"
    assert stats.total_students == 3
    assert stats.days_tracked == 1
    assert stats.avg_attendance == pytest.approx((3 - 0.5) / 3 * 100)


def test_student_table_sorted_by_registration_number(batches):
    roster = [make_student("2510103"), make_student("2510101"), make_student("2510102")]
    rows = student_attendance_table(batches["2 BCOM A"], roster)

    assert [r.student.registration_number for r in rows] == ["2510101", "2510102", "2510103"]
    assert [r.attendance.roll for r in rows] == [1, 2, 3]
    assert [r.attendance.attendance_rate for r in rows] == [50.0, 100.0, 100.0]


def test_pooled_attendance_is_day_weighted(students, batches):
    avg, n_days = pooled_attendance(batches, students, "1st Year")
    # 1BCOM A: 83.33 (one day); 1BCOM B (one student): 0 then 100
    assert n_days == 3
    assert avg == pytest.approx(((3 - 0.5) / 3 * 100 + 0.0 + 100.0) / 3)


def test_pooled_attendance_without_data():
    assert pooled_attendance({}, [], None) == (0.0, 0)


def test_pooled_attendance_skips_empty_rosters(batches):
    assert pooled_attendance(batches, [], None) == (0.0, 0)


def test_year_attendance(students, batches):
    second = year_attendance("2nd Year", students, batches)
    assert second.total_students == 2
    assert second.sections == 2
    assert second.sections_with_data == 1
    assert second.has_data
    assert second.avg_attendance == 100.0


def test_batch_total_sessions():
    batch = AttendanceBatch(label="2 BCOM A",
                            days=(make_day("2025-01-20", [], []), make_day("2025-01-21", [])))
    assert batch.total_sessions == 3
