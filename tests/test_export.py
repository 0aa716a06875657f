"""Tests for CSV export — rendering rules and the download endpoint."""

from __future__ import annotations

import csv
import io
from datetime import date, datetime, timezone
from unittest.mock import patch

from shift_tracker.common.constants import Department, ProfileRole, Section, ShiftType
from shift_tracker.employees.models import Profile
from shift_tracker.review.export import (
    EXPORT_HEADER,
    export_filename,
    format_approved_at,
    render_csv,
)
from shift_tracker.shifts.models import ShiftEntry
from tests.conftest import API, TODAY, add_entry, add_profile, gate_session, manager_session


def _profile(id="E100", name="Asha Rao", department=Department.engineering, section=Section.qc):
    return Profile(
        id=id,
        full_name=name,
        department=department,
        section=section,
        role=ProfileRole.employee,
        is_approved=True,
        pending_registration=False,
    )


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


# ═════════════════════════════════════════════════════════════════════
# RENDERING
# ═════════════════════════════════════════════════════════════════════


def test_header_only_for_no_entries():
    assert _rows(render_csv([])) == [EXPORT_HEADER]


def test_pending_entry_row():
    entry = ShiftEntry(
        employee_id="E100",
        employee=_profile(),
        date=date(2025, 3, 10),
        shift_type=ShiftType.ot_off_day,
        approved=False,
    )
    assert _rows(render_csv([entry]))[1] == [
        "2025-03-10", "E100", "Asha Rao", "Engineering", "QC",
        "OT as Off Day", "Pending", "-", "-", "-",
    ]


def test_approved_entry_uses_approver_name_and_local_time():
    manager = Profile(
        id="QC_MGR", full_name="QC Manager", department=Department.engineering,
        section=Section.qc, role=ProfileRole.manager, is_approved=True,
        pending_registration=False,
    )
    entry = ShiftEntry(
        employee_id="E100",
        employee=_profile(),
        date=date(2025, 3, 10),
        shift_type=ShiftType.first_shift,
        approved=True,
        approved_by="QC_MGR",
        approver=manager,
        approved_at=datetime(2025, 3, 10, 4, 30, tzinfo=timezone.utc),
    )
    row = _rows(render_csv([entry], tz_name="Asia/Kolkata"))[1]
    assert row[5:9] == ["1st Shift", "Approved", "QC Manager", "2025-03-10 10:00:00"]


def test_missing_owner_is_unknown():
    entry = ShiftEntry(
        employee_id="GONE",
        date=date(2025, 3, 10),
        shift_type=ShiftType.leave,
        approved=False,
    )
    row = _rows(render_csv([entry]))[1]
    assert row[1:5] == ["GONE", "Unknown", "Unknown", "Unknown"]


def test_section_dash_outside_engineering():
    entry = ShiftEntry(
        employee_id="F300",
        employee=_profile("F300", "John P", Department.finance, None),
        date=date(2025, 3, 10),
        shift_type=ShiftType.medical,
        approved=False,
    )
    row = _rows(render_csv([entry]))[1]
    assert row[3:6] == ["Finance", "-", "Medical Leave"]


def test_remark_with_comma_quote_newline_is_quoted():
    remark = 'Line A, "quoted"\nLine B'
    entry = ShiftEntry(
        employee_id="E100",
        employee=_profile(),
        date=date(2025, 3, 10),
        shift_type=ShiftType.other,
        other_remark=remark,
        approved=False,
    )
    text = render_csv([entry])
    assert '"Line A, ""quoted""\nLine B"' in text
    assert _rows(text)[1][9] == remark


def test_naive_timestamp_read_as_utc():
    assert format_approved_at(datetime(2025, 3, 10, 0, 0), "Asia/Kolkata") == "2025-03-10 05:30:00"
    assert format_approved_at(None) == "-"


def test_filenames():
    assert export_filename("QC", date(2025, 3, 10)) == "QC-attendance-2025-03-10.csv"
    assert export_filename(None, date(2025, 3, 10)) == "all-attendance-2025-03-10.csv"


# ═════════════════════════════════════════════════════════════════════
# ENDPOINT
# ═════════════════════════════════════════════════════════════════════


async def test_manager_export_scoped_to_section(client, db, managers):
    await add_profile(db, id="E100", section=Section.qc)
    await add_profile(db, id="E200", full_name="Meera N", section=Section.rtg)
    await add_entry(db, "E100", TODAY, approved_by="QC_MGR")
    await add_entry(db, "E200", TODAY)

    headers = await manager_session(client)
    with patch("shift_tracker.review.service.local_today", return_value=TODAY):
        resp = await client.get(f"{API}/review/export", headers=headers)

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.headers["content-disposition"] == (
        'attachment; filename="QC-attendance-2025-03-10.csv"'
    )
    rows = _rows(resp.text)
    assert len(rows) == 2
    assert rows[1][1] == "E100"
    assert rows[1][6] == "Approved"
    assert rows[1][7] == "QC Manager"


async def test_export_applies_filters(client, db, managers):
    await add_profile(db, id="E100", section=Section.qc)
    await add_entry(db, "E100", TODAY, approved_by="QC_MGR")
    await add_entry(db, "E100", date(2025, 3, 11), ShiftType.second_shift)

    headers = await manager_session(client)
    resp = await client.get(
        f"{API}/review/export", params={"approval": "pending"}, headers=headers,
    )
    rows = _rows(resp.text)
    assert [r[0] for r in rows[1:]] == ["2025-03-11"]


async def test_hr_export_covers_all_sections(client, db, managers):
    await add_profile(db, id="E100", section=Section.qc)
    await add_profile(db, id="E200", full_name="Meera N", section=Section.rtg)
    await add_entry(db, "E100", TODAY)
    await add_entry(db, "E200", TODAY)

    headers = await gate_session(client, "hr")
    with patch("shift_tracker.review.service.local_today", return_value=TODAY):
        resp = await client.get(f"{API}/review/export", headers=headers)
    assert "all-attendance-2025-03-10.csv" in resp.headers["content-disposition"]
    assert len(_rows(resp.text)) == 3
