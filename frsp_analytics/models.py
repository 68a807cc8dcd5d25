# frsp_analytics/models.py
"""
Immutable input records.

Both tables are loaded once and shared read-only by every view, so all
records are frozen and collections are tuples / frozensets.
"""

from dataclasses import dataclass
from datetime import date
from typing import FrozenSet, Tuple


@dataclass(frozen=True)
class StudentRecord:
    registration_number: str
    name: str = ""
    year: str = ""
    section: str = ""
    gender: str = ""
    practical: float = 0.0
    theory: float = 0.0
    total: float = 0.0
    assessed: bool = False
    email: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.registration_number

    @property
    def has_score(self) -> bool:
        """Assessed with a recorded, nonzero total."""
        return self.assessed and self.total > 0


@dataclass(frozen=True)
class Session:
    time: str
    absent: FrozenSet[int] = frozenset()
    absent_count: int = 0


@dataclass(frozen=True)
class AttendanceDay:
    date: date
    sessions: Tuple[Session, ...] = ()


@dataclass(frozen=True)
class AttendanceBatch:
    label: str
    days: Tuple[AttendanceDay, ...] = ()

    @property
    def total_sessions(self) -> int:
        return sum(len(day.sessions) for day in self.days)
