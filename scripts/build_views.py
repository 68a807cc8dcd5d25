#!/usr/bin/env python3
# scripts/build_views.py
"""
Bake the dashboard views to JSON for the static front end.

Usage:
    python scripts/build_views.py --data-dir public/data --out public/views
    python scripts/build_views.py --year "1st Year" --section "1BCOM A"
"""

import os
import json
import argparse
import logging

import pandas as pd

from frsp_analytics import config
from frsp_analytics.config import setup_logging
from frsp_analytics.data_loading import load_dataset, sessions_frame
from frsp_analytics.errors import SelectionError
from frsp_analytics.schemas import AssessmentViewOut, AttendanceViewOut, DashboardOut
from frsp_analytics.views import (
    Selection,
    build_assessment_view,
    build_attendance_view,
    build_dashboard_view,
)

logger = logging.getLogger("frsp_analytics.build_views")


def write_json(model, path):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(model.model_dump(mode="json"), f, indent=2)
    logger.info(f"Wrote {path}")


def print_session_summary(batches):
    df = sessions_frame(batches)
    if df.empty:
        print("No attendance sessions loaded.")
        return
    summary = (
        df.groupby(["batch", "section"])
          .agg(days=("date", "nunique"), sessions=("time", "size"),
               mean_absent=("absent_count", "mean"))
          .reset_index()
    )
    print("\nAttendance batches\n")
    print(summary.to_string(index=False))


def print_dashboard(view):
    stats = view.assessment_stats
    print("\n=== Overview ===")
    print(f"  Students          = {view.total_students}")
    print(f"  Avg attendance    = {view.avg_attendance:.1f}%")
    print(f"  Assessed          = {stats.count}")
    print(f"  Avg score         = {stats.avg_total:.2f} / 50")
    print(f"  Pass rate         = {stats.pass_rate:.1f}%")
    print(f"  Attendance~score  r = {view.correlation_result.correlation:.3f}"
          f" (n={len(view.correlation_result.pairs)})")
    if view.trend is not None:
        print(f"  Trend             score = {view.trend.intercept:.2f}"
              f" + {view.trend.slope:.3f} * attendance, R^2 = {view.trend.r_squared:.3f}")

    bands = pd.DataFrame([vars(b) for b in view.score_by_attendance])
    print("\nAvg score by attendance\n")
    print(bands.to_string(index=False))


def main():
    parser = argparse.ArgumentParser(
        description="Compute the attendance/assessment views and write them as JSON."
    )
    parser.add_argument("--data-dir", default=config.DATA_DIR,
                        help="Directory holding students.json and attendance.json")
    parser.add_argument("--out", "-o", default=config.RESULTS_DIR,
                        help="Output directory for the view JSON files")
    parser.add_argument("--year", default="", help="Academic year to select")
    parser.add_argument("--section", default="", help="Section to select (needs --year)")
    parser.add_argument("--log-file", default=None, help="Also log (DEBUG) to this file")
    args = parser.parse_args()

    setup_logging(args.log_file)

    # 1) Load both tables once
    dataset = load_dataset(args.data_dir)
    students, batches = dataset.students, dataset.batches
    print_session_summary(batches)

    # 2) Selection
    selection = Selection().select_year(args.year)
    if args.section:
        try:
            selection = selection.select_section(args.section)
        except SelectionError as exc:
            parser.error(str(exc))
    logger.info(f"Selection: {selection.state} {selection.year!r} {selection.section!r}")

    # 3) Views
    dashboard = build_dashboard_view(students, batches)
    attendance = build_attendance_view(students, batches, selection)
    assessment = build_assessment_view(students, selection)
    print_dashboard(dashboard)

    # 4) Save
    os.makedirs(args.out, exist_ok=True)
    write_json(DashboardOut.model_validate(dashboard), os.path.join(args.out, "dashboard.json"))
    write_json(AttendanceViewOut.model_validate(attendance), os.path.join(args.out, "attendance.json"))
    write_json(AssessmentViewOut.model_validate(assessment), os.path.join(args.out, "assessment.json"))


if __name__ == "__main__":
    main()
