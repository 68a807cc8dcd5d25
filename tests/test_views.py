from datetime import date

import pytest

from frsp_analytics.errors import SelectionError
from frsp_analytics.views import (
    NO_SELECTION,
    SECTION_SELECTED,
    YEAR_SELECTED,
    Selection,
    available_sections,
    available_years,
    build_assessment_view,
    build_attendance_view,
    build_dashboard_view,
    filter_students,
)


# -----------------------------------------------------------------------------
# Selection state
# -----------------------------------------------------------------------------

def test_selection_transitions():
    s = Selection()
    assert s.state == NO_SELECTION

    s = s.select_year("1st Year")
    assert s.state == YEAR_SELECTED

    s = s.select_section("1BCOM A")
    assert s.state == SECTION_SELECTED
    assert (s.year, s.section) == ("1st Year", "1BCOM A")

    # a new year clears the section
    s = s.select_year("2nd Year")
    assert (s.year, s.section) == ("2nd Year", "")

    # "all years" clears both
    assert s.select_section("1BCOMSF").select_year("") == Selection()
    assert s.clear() == Selection()


def test_section_requires_year():
    with pytest.raises(SelectionError):
        Selection().select_section("1BCOM A")
    with pytest.raises(SelectionError):
        Selection(section="1BCOM A")


def test_selection_is_hashable():
    assert len({Selection(), Selection(), Selection("1st Year")}) == 2


def test_options(students):
    assert available_years(students) == ["1st Year", "2nd Year"]
    assert available_sections(students, "2nd Year") == ["1BBA A", "1BCOMSF"]
    assert len(available_sections(students)) == 4


def test_filter_students(students):
    assert len(filter_students(students, Selection())) == 6
    assert len(filter_students(students, Selection("1st Year"))) == 4
    assert len(filter_students(students, Selection("1st Year", "1BCOM A"))) == 3


# -----------------------------------------------------------------------------
# Assessment view
# -----------------------------------------------------------------------------

def test_assessment_view_overview(students):
    view = build_assessment_view(students, Selection())

    assert view.total_students == 6
    assert view.assessed_count == 5
    assert view.coverage == pytest.approx(5 / 6 * 100)
    assert [y.key for y in view.year_summaries] == ["1st Year", "2nd Year"]
    assert view.section_summaries == ()
    assert view.roster == ()


def test_assessment_view_year(students):
    view = build_assessment_view(students, Selection("2nd Year"))

    assert view.total_students == 2
    assert view.stats.avg_total == pytest.approx(21.5)
    assert [s.key for s in view.section_summaries] == ["1BBA A", "1BCOMSF"]
    assert view.year_summaries == ()


def test_assessment_view_section(students):
    view = build_assessment_view(students, Selection("1st Year", "1BCOM A"),
                                 sort_by="total", descending=True)

    assert view.total_students == 3
    assert view.assessed_count == 2
    assert [s.registration_number for s in view.roster] == ["2510101", "2510102", "2510103"]
    assert [s.registration_number for s in view.top_performers] == ["2510101", "2510102"]


def test_assessment_view_is_idempotent(students):
    sel = Selection("1st Year", "1BCOM A")
    assert build_assessment_view(students, sel) == build_assessment_view(students, sel)


# -----------------------------------------------------------------------------
# Attendance view
# -----------------------------------------------------------------------------

def test_attendance_view_section_with_data(students, batches):
    view = build_attendance_view(students, batches, Selection("1st Year", "1BCOM A"))

    assert view.batch == "2 BCOM A"
    assert view.total_students == 3
    assert view.avg_attendance == pytest.approx((3 - 0.5) / 3 * 100)
    assert view.days_tracked == 1
    assert view.total_sessions == 2
    assert [d.date for d in view.daily] == [date(2025, 1, 20)]
    assert [r.attendance.attendance_rate for r in view.students] == [50.0, 100.0, 100.0]


def test_attendance_view_section_without_data(students, batches):
    view = build_attendance_view(students, batches, Selection("2nd Year", "1BBA A"))

    assert view.avg_attendance is None
    assert view.total_students == 1
    assert view.daily == ()
    assert view.students == ()


def test_attendance_view_year(students, batches):
    view = build_attendance_view(students, batches, Selection("1st Year"))

    assert view.days_tracked == 3
    assert view.total_sessions == 5
    summaries = {s.section: s for s in view.section_summaries}
    assert summaries["1BCOM A"].has_data
    assert summaries["1BCOM B"].avg_attendance == pytest.approx(50.0)
    assert summaries["1BCOM B"].days == 2


def test_attendance_view_year_marks_untracked_sections(students, batches):
    view = build_attendance_view(students, batches, Selection("2nd Year"))
    summaries = {s.section: s for s in view.section_summaries}

    assert not summaries["1BBA A"].has_data
    assert summaries["1BBA A"].avg_attendance == 0.0
    assert summaries["1BCOMSF"].has_data


def test_attendance_view_year_without_batch_in_sheets(students, batches):
    partial = {label: b for label, b in batches.items() if label != "2 BCOM B"}
    view = build_attendance_view(students, partial, Selection("1st Year"))
    summaries = {s.section: s for s in view.section_summaries}

    assert summaries["1BCOM A"].has_data
    assert not summaries["1BCOM B"].has_data
    assert summaries["1BCOM B"].total_students == 1


def test_attendance_view_overview(students, batches):
    view = build_attendance_view(students, batches, Selection())

    assert view.total_students == 6
    assert view.days_tracked == 4
    assert view.avg_attendance == pytest.approx(((3 - 0.5) / 3 * 100 + 0 + 100 + 100) / 4)
    assert [y.year for y in view.year_summaries] == ["1st Year", "2nd Year"]
    assert all(y.has_data for y in view.year_summaries)


def test_attendance_view_without_any_batches(students):
    view = build_attendance_view(students, {}, Selection())
    assert view.avg_attendance is None
    assert view.days_tracked == 0


# -----------------------------------------------------------------------------
# Dashboard
# -----------------------------------------------------------------------------

def test_dashboard_view(students, batches):
    view = build_dashboard_view(students, batches)

    assert view.total_students == 6
    assert [s.section for s in view.sections] == ["1BCOM A", "1BCOM B", "1BCOMSF"]
    assert view.avg_attendance == pytest.approx(((3 - 0.5) / 3 * 100 + 50 + 100) / 3)
    assert view.assessment_stats.count == 5
    assert [(d.batch, d.day.date) for d in view.daily] == [
        ("2 BCOM A", date(2025, 1, 20)),
        ("2 BCOM B", date(2025, 1, 20)),
        ("2 BCOM B", date(2025, 1, 21)),
        ("4 BCOM F", date(2025, 1, 27)),
    ]
    assert len(view.correlation_result.pairs) == 4
    assert view.trend is not None
    assert view.sections_without_data == ("1BBA A",)


def test_dashboard_view_is_idempotent(students, batches):
    assert build_dashboard_view(students, batches) == build_dashboard_view(students, batches)


def test_dashboard_with_no_data():
    view = build_dashboard_view([], {})
    assert view.avg_attendance == 0.0
    assert view.assessment_stats.count == 0
    assert view.correlation_result.correlation == 0.0
    assert view.trend is None
