#!/usr/bin/env python3
# scripts/plot_dashboard.py
"""
Render the overview dashboard charts to PNG.

Usage:
    python scripts/plot_dashboard.py --data-dir public/data --out-dir public/images
"""

import os
import argparse
import logging

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from frsp_analytics import config
from frsp_analytics.config import setup_logging
from frsp_analytics.data_loading import load_dataset
from frsp_analytics.plotting_utils import (
    plot_attendance_vs_score,
    plot_batch_daily_attendance,
    plot_daily_attendance,
    plot_practical_vs_theory,
    plot_score_by_attendance,
    plot_score_distribution,
)
from frsp_analytics.views import build_dashboard_view

logger = logging.getLogger("frsp_analytics.plot_dashboard")


def save(out_dir, name):
    path = os.path.join(out_dir, name)
    plt.savefig(path, dpi=300)
    plt.close()
    logger.info(f"Saved {path}")


def main():
    parser = argparse.ArgumentParser(description="Plot the overview dashboard charts.")
    parser.add_argument("--data-dir", default=config.DATA_DIR)
    parser.add_argument("--out-dir", default=config.FIG_DIR)
    args = parser.parse_args()

    setup_logging()
    os.makedirs(args.out_dir, exist_ok=True)

    dataset = load_dataset(args.data_dir)
    view = build_dashboard_view(dataset.students, dataset.batches)
    stats = view.assessment_stats

    # 1) Daily attendance across tracked sections
    plot_batch_daily_attendance(view.daily)
    save(args.out_dir, "daily_attendance.png")

    # 2) Score distribution
    plot_score_distribution(stats.histogram)
    save(args.out_dir, "score_distribution.png")

    # 3) Practical vs theory
    plot_practical_vs_theory(stats.avg_practical, stats.avg_theory)
    save(args.out_dir, "practical_vs_theory.png")

    # 4) Attendance vs score
    plot_attendance_vs_score(view.correlation_result.pairs, view.trend,
                             view.correlation_result.correlation)
    save(args.out_dir, "attendance_vs_score.png")

    plot_score_by_attendance(view.score_by_attendance)
    save(args.out_dir, "score_by_attendance.png")

    # 5) One daily chart per tracked section
    for section in view.sections:
        plot_daily_attendance(section.daily, title=f"Daily Attendance: {section.section}")
        save(args.out_dir, f"attendance_{section.section.replace(' ', '_')}.png")

    print("All plots saved to:", args.out_dir)


if __name__ == "__main__":
    main()
