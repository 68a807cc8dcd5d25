# frsp_analytics/assessment.py

import bisect
import logging
from dataclasses import asdict, dataclass, fields
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from frsp_analytics.models import StudentRecord

logger = logging.getLogger(__name__)

MAX_PRACTICAL = 20
MAX_THEORY = 30
MAX_TOTAL = 50
PASS_MARK = 25          # half of MAX_TOTAL
HIGH_MARK = 40

# (label, inclusive upper bound); lower bound is the previous upper bound
SCORE_RANGES = (
    ("0-10", 10),
    ("11-20", 20),
    ("21-30", 30),
    ("31-40", 40),
    ("41-50", 50),
)
_UPPER_BOUNDS = [upper for _, upper in SCORE_RANGES]


@dataclass(frozen=True)
class ScoreBucket:
    range: str
    count: int


@dataclass(frozen=True)
class AssessmentStats:
    count: int
    avg_total: float
    avg_practical: float
    avg_theory: float
    highest: float
    pass_rate: float
    histogram: Tuple[ScoreBucket, ...]


def assessed_only(records: Iterable[StudentRecord]) -> List[StudentRecord]:
    return [r for r in records if r.has_score]


def _mean(values: Sequence[float]) -> float:
    # empty set -> 0, never NaN
    if not values:
        return 0.0
    return float(sum(values) / len(values))


def bucket_index(total: float) -> int:
    """Histogram bucket for a total; anything above the top bound lands in the last one."""
    return min(bisect.bisect_left(_UPPER_BOUNDS, total), len(SCORE_RANGES) - 1)


def score_distribution(records: Iterable[StudentRecord]) -> Tuple[ScoreBucket, ...]:
    counts = [0] * len(SCORE_RANGES)
    for r in assessed_only(records):
        counts[bucket_index(r.total)] += 1
    return tuple(ScoreBucket(range=label, count=n)
                 for (label, _), n in zip(SCORE_RANGES, counts))


def aggregate(records: Iterable[StudentRecord]) -> AssessmentStats:
    """
    Summary statistics over the assessed records (assessed flag set and
    total > 0). With nothing assessed every figure is 0 and every histogram
    bucket is present with a zero count.
    """
    data = assessed_only(records)
    totals = [r.total for r in data]

    return AssessmentStats(
        count=len(data),
        avg_total=_mean(totals),
        avg_practical=_mean([r.practical for r in data]),
        avg_theory=_mean([r.theory for r in data]),
        highest=float(max(totals)) if totals else 0.0,
        pass_rate=_mean([100.0 if t >= PASS_MARK else 0.0 for t in totals]),
        histogram=score_distribution(data),
    )


def coverage(assessed: int, total: int) -> float:
    """Share of students assessed, in percent."""
    if total <= 0:
        return 0.0
    return assessed / total * 100


def score_band(total: float) -> str:
    if total >= HIGH_MARK:
        return "high"
    if total >= PASS_MARK:
        return "pass"
    return "low"


# -----------------------------------------------------------------------------
# Roster ordering
# -----------------------------------------------------------------------------

SORT_KEYS = {
    "name": lambda r: r.name.lower(),
    "regNo": lambda r: r.registration_number,
    "total": lambda r: r.total,
}


def sort_roster(records: Iterable[StudentRecord], by: str = "regNo",
                descending: bool = False) -> List[StudentRecord]:
    if by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key {by!r}; expected one of {sorted(SORT_KEYS)}")
    return sorted(records, key=SORT_KEYS[by], reverse=descending)


def top_performers(records: Iterable[StudentRecord], n: int = 5) -> List[StudentRecord]:
    return sorted(assessed_only(records), key=lambda r: r.total, reverse=True)[:n]


# -----------------------------------------------------------------------------
# Year / section summaries
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class GroupSummary:
    key: str
    year: str
    total: int
    assessed: int
    avg_score: float

    @property
    def coverage(self) -> float:
        return coverage(self.assessed, self.total)


def students_frame(records: Iterable[StudentRecord]) -> pd.DataFrame:
    rows = [asdict(r) for r in records]
    df = pd.DataFrame(rows, columns=[f.name for f in fields(StudentRecord)])
    df["has_score"] = df["assessed"].astype(bool) & (df["total"].astype(float) > 0)
    return df


def _summarise(df: pd.DataFrame, by: str) -> List[GroupSummary]:
    df = df[df[by] != ""]
    if df.empty:
        return []

    aggs = {
        "total": ("registration_number", "size"),
        "assessed": ("has_score", "sum"),
    }
    if by != "year":
        aggs["year"] = ("year", "first")

    summary = df.groupby(by, sort=True).agg(**aggs)
    if by == "year":
        summary["year"] = summary.index
    avg = df[df["has_score"]].groupby(by)["total"].mean()
    summary["avg_score"] = avg.reindex(summary.index).fillna(0.0)

    return [
        GroupSummary(
            key=str(key),
            year=str(row["year"]),
            total=int(row["total"]),
            assessed=int(row["assessed"]),
            avg_score=float(row["avg_score"]),
        )
        for key, row in summary.iterrows()
    ]


def year_summaries(records: Sequence[StudentRecord]) -> List[GroupSummary]:
    """Students, assessed count and mean total per academic year, years sorted."""
    return _summarise(students_frame(records), "year")


def section_summaries(records: Sequence[StudentRecord],
                      year: Optional[str] = None) -> List[GroupSummary]:
    """Same as year_summaries, per section (restricted to `year` when given)."""
    df = students_frame(records)
    if year:
        df = df[df["year"] == year]
    return _summarise(df, "section")
