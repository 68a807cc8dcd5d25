# frsp_analytics/correlation.py
"""
Attendance vs. assessment: per-student join, Pearson r, and the
score-by-attendance-band and trend-line summaries shown beside it.
"""

import math
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.stats import linregress

from frsp_analytics.attendance import student_attendance
from frsp_analytics.models import AttendanceBatch, StudentRecord
from frsp_analytics.sections import BATCH_SECTIONS, INVALID_ROLL, resolve_roll

logger = logging.getLogger(__name__)

# relative to n * sum of squares
SPREAD_TOLERANCE = 1e-12

# (label, lower bound inclusive, upper bound exclusive)
ATTENDANCE_BANDS = (
    ("< 70%", 0.0, 70.0),
    ("70-80%", 70.0, 80.0),
    ("80-90%", 80.0, 90.0),
    ("90-100%", 90.0, 101.0),
)


@dataclass(frozen=True)
class CorrelationPoint:
    name: str
    registration_number: str
    attendance_rate: float
    score: float
    section: str


@dataclass(frozen=True)
class CorrelationResult:
    pairs: Tuple[CorrelationPoint, ...]
    correlation: float


def pearson(xs: Sequence[float], ys: Sequence[float]) -> float:
    """
    Pearson product-moment coefficient

        r = (n*Sxy - Sx*Sy) / sqrt((n*Sxx - Sx^2) * (n*Syy - Sy^2))

    Defined as 0 for fewer than 2 points or a denominator lost in
    rounding noise, e.g. when either axis has no variance.
    """
    n = len(xs)
    if n < 2 or n != len(ys):
        return 0.0

    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    sum_x, sum_y = x.sum(), y.sum()
    sum_xx, sum_yy = (x * x).sum(), (y * y).sum()

    numerator = n * (x * y).sum() - sum_x * sum_y
    spread_x = n * sum_xx - sum_x ** 2
    spread_y = n * sum_yy - sum_y ** 2
    # a constant axis leaves only rounding noise after the subtraction
    if spread_x <= SPREAD_TOLERANCE * n * sum_xx or spread_y <= SPREAD_TOLERANCE * n * sum_yy:
        return 0.0

    return float(numerator / math.sqrt(spread_x * spread_y))


def correlation_pairs(students: Sequence[StudentRecord],
                      batches: Dict[str, AttendanceBatch]) -> List[CorrelationPoint]:
    """
    One point per assessed student (total > 0) in a section with attendance
    data. Order: batch table order, then registration number ascending.
    Students whose roll does not resolve are skipped.
    """
    pairs = []
    for label, mapping in BATCH_SECTIONS.items():
        batch = batches.get(label)
        if batch is None:
            continue

        section_students = sorted(
            (s for s in students if s.section == mapping.section and s.has_score),
            key=lambda s: s.registration_number,
        )
        for student in section_students:
            roll = resolve_roll(student.registration_number, mapping.section)
            if roll <= INVALID_ROLL:
                logger.debug(f"Skipping {student.registration_number}: no roll in {mapping.section}")
                continue

            rate = student_attendance(batch.days, roll).attendance_rate
            pairs.append(CorrelationPoint(
                name=student.display_name,
                registration_number=student.registration_number,
                attendance_rate=rate,
                score=float(student.total),
                section=mapping.section,
            ))
    return pairs


def correlate(students: Sequence[StudentRecord],
              batches: Dict[str, AttendanceBatch]) -> CorrelationResult:
    pairs = correlation_pairs(students, batches)
    r = pearson([p.attendance_rate for p in pairs], [p.score for p in pairs])
    logger.debug(f"Correlation over {len(pairs)} students: r = {r:.3f}")
    return CorrelationResult(pairs=tuple(pairs), correlation=r)


# -----------------------------------------------------------------------------
# Summaries of the joined points
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class BandScore:
    range: str
    avg_score: float
    count: int


def score_by_attendance_band(pairs: Sequence[CorrelationPoint]) -> List[BandScore]:
    bands = []
    for label, low, high in ATTENDANCE_BANDS:
        scores = [p.score for p in pairs if low <= p.attendance_rate < high]
        avg = sum(scores) / len(scores) if scores else 0.0
        bands.append(BandScore(range=label, avg_score=float(avg), count=len(scores)))
    return bands


@dataclass(frozen=True)
class TrendLine:
    slope: float
    intercept: float
    r_squared: float
    p_value: float
    n: int


def attendance_trend(pairs: Sequence[CorrelationPoint]) -> Optional[TrendLine]:
    """
    Least-squares line of score on attendance rate.
    None with fewer than 3 points or when every attendance rate is the same.
    """
    if len(pairs) < 3:
        return None
    xs = [p.attendance_rate for p in pairs]
    ys = [p.score for p in pairs]
    if len(set(xs)) < 2:
        return None

    slope, intercept, r_val, p_val, _ = linregress(xs, ys)
    return TrendLine(
        slope=float(slope),
        intercept=float(intercept),
        r_squared=float(r_val ** 2),
        p_value=float(p_val),
        n=len(pairs),
    )
