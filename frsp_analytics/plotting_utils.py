# frsp_analytics/plotting_utils.py

import matplotlib.pyplot as plt
import numpy as np

GOOD_ATTENDANCE = 90
FAIR_ATTENDANCE = 75


def attendance_color(rate):
    if rate >= GOOD_ATTENDANCE:
        return "#34c759"
    if rate >= FAIR_ATTENDANCE:
        return "#ff9500"
    return "#ff3b30"


def _attendance_bars(labels, rates, title):
    plt.figure(figsize=(max(8, len(rates) * 0.6), 5))
    plt.bar(range(len(rates)), rates, color=[attendance_color(r) for r in rates])
    plt.xticks(range(len(rates)), labels, rotation=45, ha="right", fontsize=8)
    plt.ylim(0, 100)
    plt.ylabel("Attendance (%)")
    plt.title(title)
    plt.tight_layout()


def plot_daily_attendance(days, title="Daily Attendance Rate"):
    """days: DayAttendance records of one section. Bars are coloured by attendance band."""
    _attendance_bars([f"{d.date:%b %d}" for d in days], [d.attendance for d in days], title)


def plot_batch_daily_attendance(batch_days, title="Daily Attendance Rate"):
    """batch_days: BatchDay records across sections, labelled with date and section."""
    _attendance_bars([f"{b.day.date:%b %d}\n{b.section}" for b in batch_days],
                     [b.day.attendance for b in batch_days], title)


def plot_score_distribution(buckets, title="Assessment Score Distribution"):
    plt.figure(figsize=(8, 5))
    plt.bar([b.range for b in buckets], [b.count for b in buckets],
            color="#0071e3", edgecolor="black")
    plt.xlabel("Total score (out of 50)")
    plt.ylabel("Students")
    plt.title(title)
    plt.tight_layout()


def plot_score_by_attendance(bands, title="Avg Score by Attendance"):
    plt.figure(figsize=(8, 5))
    plt.bar([b.range for b in bands], [b.avg_score for b in bands], color="teal")
    for i, b in enumerate(bands):
        plt.annotate(f"n={b.count}", (i, b.avg_score), ha="center", va="bottom", fontsize=8)
    plt.xlabel("Attendance band")
    plt.ylabel("Average total score")
    plt.title(title)
    plt.tight_layout()


def plot_attendance_vs_score(pairs, trend=None, correlation=None,
                             title="Attendance vs. Assessment Score"):
    xs = np.array([p.attendance_rate for p in pairs], dtype=float)
    ys = np.array([p.score for p in pairs], dtype=float)

    plt.figure(figsize=(6, 4))
    plt.scatter(xs, ys, s=10, alpha=0.6)
    if trend is not None and len(xs):
        line_x = np.linspace(xs.min(), xs.max(), 100)
        plt.plot(line_x, trend.intercept + trend.slope * line_x, color="red", linewidth=2)
    plt.xlabel("Attendance rate (%)")
    plt.ylabel("Total score")
    if correlation is not None:
        title = f"{title} (r = {correlation:.2f})"
    plt.title(title)
    plt.tight_layout()


def plot_practical_vs_theory(practical, theory, title="Avg. Score Breakdown"):
    plt.figure(figsize=(5, 5))
    if practical + theory > 0:
        plt.pie([practical, theory],
                labels=[f"Practical\n{practical:.1f}/20", f"Theory\n{theory:.1f}/30"],
                colors=["#0071e3", "#34c759"], startangle=90)
    plt.title(title)
    plt.tight_layout()
