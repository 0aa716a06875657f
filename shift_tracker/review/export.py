"""CSV rendering of reviewed shift entries.

Columns::

    Date, Employee ID, Employee Name, Department, Section,
    Shift Type, Status, Approved By, Approved At, Remark

Absent optional values render as ``-``; an entry whose owner no longer
exists renders ``Unknown`` for the owner columns. Quoting follows RFC 4180
via the stdlib ``csv`` writer.
"""

from __future__ import annotations

import csv
import io
from datetime import date, datetime, timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from shift_tracker.common.constants import (
    EMPTY_CELL,
    EXPORT_DATETIME_FORMAT,
    ISO_DATE_FORMAT,
    UNKNOWN_CELL,
)
from shift_tracker.config import settings
from shift_tracker.shifts.models import ShiftEntry

EXPORT_HEADER = [
    "Date",
    "Employee ID",
    "Employee Name",
    "Department",
    "Section",
    "Shift Type",
    "Status",
    "Approved By",
    "Approved At",
    "Remark",
]


def format_approved_at(value: Optional[datetime], tz_name: Optional[str] = None) -> str:
    if value is None:
        return EMPTY_CELL
    if value.tzinfo is None:
        # SQLite hands back naive UTC.
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(ZoneInfo(tz_name or settings.TIMEZONE))
    return local.strftime(EXPORT_DATETIME_FORMAT)


def entry_row(entry: ShiftEntry, tz_name: Optional[str] = None) -> list[str]:
    owner = entry.employee
    if owner is None:
        name, department, section = UNKNOWN_CELL, UNKNOWN_CELL, UNKNOWN_CELL
    else:
        name = owner.full_name
        department = owner.department.value
        section = owner.section.value if owner.section else EMPTY_CELL

    approver = entry.approver
    return [
        entry.date.strftime(ISO_DATE_FORMAT),
        entry.employee_id,
        name,
        department,
        section,
        entry.shift_type.label,
        "Approved" if entry.approved else "Pending",
        approver.full_name if approver is not None else EMPTY_CELL,
        format_approved_at(entry.approved_at, tz_name),
        entry.other_remark or EMPTY_CELL,
    ]


def render_csv(entries: Iterable[ShiftEntry], tz_name: Optional[str] = None) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(EXPORT_HEADER)
    for entry in entries:
        writer.writerow(entry_row(entry, tz_name))
    return buffer.getvalue()


def export_filename(section: Optional[str], today: date) -> str:
    """``QC-attendance-2025-03-10.csv``; ``all-`` when not section-scoped."""
    return f"{section or 'all'}-attendance-{today.strftime(ISO_DATE_FORMAT)}.csv"
