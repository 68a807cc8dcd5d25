# frsp_analytics/sections.py
"""
Closed lookup tables linking the two naming schemes of the data set, and the
roll-number resolver built on them.

  batch label (attendance.json)  ->  year + section (students.json)
  section                        ->  registration-number base offset

A section outside these tables has no attendance data. That is reported as
"no data" by the callers, never as zero absentees.
"""

import re
import logging
from collections import namedtuple
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

BatchMapping = namedtuple("BatchMapping", ["year", "section"])

# Declared order drives the correlation output order.
# Week 1 (Jan 20-22): "2 BCOM" batches are the 1st Year sections
# Week 2 (Jan 27-29): "4 BCOM" batches are the 2nd Year sections
BATCH_SECTIONS = {
    "2 BCOM A": BatchMapping("1st Year", "1BCOM A"),
    "2 BCOM B": BatchMapping("1st Year", "1BCOM B"),
    "2 BCOM C": BatchMapping("1st Year", "1BCOM C"),
    "2 BCOM D": BatchMapping("1st Year", "1BCOM D"),
    "2 BCOM F": BatchMapping("1st Year", "1BCOM E"),
    "4 BCOM A": BatchMapping("2nd Year", "1BCOMA&T"),
    "4 BCOM B": BatchMapping("2nd Year", "1BCOMAFA"),
    "4 BCOM C": BatchMapping("2nd Year", "1BCOMF&I A"),
    "4 BCOM D": BatchMapping("2nd Year", "1BCOMF&I B"),
    "4 BCOM F": BatchMapping("2nd Year", "1BCOMSF"),
}

# roll = registration number - base
SECTION_BASES = {
    "1BCOM A": 2510100,     # 2510101-2510179
    "1BCOM B": 2510200,     # 2510201-2510277
    "1BCOM C": 2510300,     # 2510301-2510378
    "1BCOM D": 2510400,     # 2510401-2510476
    "1BCOM E": 2510500,     # 2510501-2510577
    "1BCOMA&T": 2511000,    # 2511001-2511088
    "1BCOMAFA": 2511100,    # 2511101-2511178
    "1BCOMF&I A": 2511300,  # 2511301-2511377
    "1BCOMF&I B": 2511400,  # 2511401-2511477
    "1BCOMSF": 2511500,     # 2511501-2511592
}

INVALID_ROLL = 0

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_registration_number(registration_number) -> Optional[int]:
    """Integer prefix of a registration number, or None when there is none."""
    if registration_number is None:
        return None
    match = _LEADING_INT.match(str(registration_number))
    if not match:
        return None
    return int(match.group(1))


def resolve_roll(registration_number, section: str) -> int:
    """
    Map a registration number to the per-section roll number used in the
    absentee lists. Returns INVALID_ROLL (0) when the number does not parse
    or the section has no base offset. No range check is done: a roll that
    never shows up in an absent list simply counts as present.
    """
    number = parse_registration_number(registration_number)
    if number is None:
        return INVALID_ROLL

    base = SECTION_BASES.get(section)
    if base is None:
        return INVALID_ROLL

    return number - base


def section_for_batch(batch_label: str) -> Optional[BatchMapping]:
    return BATCH_SECTIONS.get(batch_label)


def batch_for_section(section: str, year: Optional[str] = None) -> Optional[str]:
    """Batch label holding attendance for `section` (and `year`, when given)."""
    for label, mapping in BATCH_SECTIONS.items():
        if mapping.section != section:
            continue
        if year and mapping.year != year:
            continue
        return label
    return None


def has_attendance_data(section: str, year: Optional[str] = None) -> bool:
    return batch_for_section(section, year) is not None


# -----------------------------------------------------------------------------
# Load-time completeness check
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class MappingReport:
    unmapped_batches: Tuple[str, ...] = ()
    missing_batches: Tuple[str, ...] = ()
    sections_without_base: Tuple[str, ...] = ()
    sections_without_attendance: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not (self.unmapped_batches or self.missing_batches
                    or self.sections_without_base)


def check_mappings(students, batches) -> MappingReport:
    """
    Compare the closed tables against the loaded data:
      - batch labels in the data with no mapping (their data is never shown)
      - mapped batches absent from the data
      - mapped sections with no base offset (rolls cannot be derived)
      - roster sections with no attendance mapping (shown as "no data")
    """
    mapped_sections = {m.section for m in BATCH_SECTIONS.values()}
    roster_sections = sorted({s.section for s in students if s.section})

    report = MappingReport(
        unmapped_batches=tuple(b for b in batches if b not in BATCH_SECTIONS),
        missing_batches=tuple(b for b in BATCH_SECTIONS if b not in batches),
        sections_without_base=tuple(sorted(s for s in mapped_sections
                                           if s not in SECTION_BASES)),
        sections_without_attendance=tuple(s for s in roster_sections
                                          if s not in mapped_sections),
    )

    for label in report.unmapped_batches:
        logger.warning(f"Attendance batch '{label}' has no section mapping; ignored.")
    for label in report.missing_batches:
        logger.warning(f"Mapped batch '{label}' not found in attendance data.")
    for section in report.sections_without_base:
        logger.warning(f"Section '{section}' has no registration base; rolls unresolvable.")
    for section in report.sections_without_attendance:
        logger.info(f"Section '{section}' has no attendance data.")

    return report
