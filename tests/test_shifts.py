"""Tests for the shift wizard endpoints and ShiftService persistence."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select

from shift_tracker.common.constants import ShiftType
from shift_tracker.shifts.models import ShiftEntry
from shift_tracker.shifts.store import ShiftEntryStore
from tests.conftest import (
    API,
    TODAY,
    TestSessionFactory,
    add_entry,
    add_profile,
    employee_session,
    open_view_session,
    switch_view,
)

TOMORROW = TODAY + timedelta(days=1)


@pytest.fixture(autouse=True)
def _fixed_today():
    with patch("shift_tracker.shifts.service.local_today", return_value=TODAY):
        yield


@pytest.fixture
async def employee_headers(client, db):
    await add_profile(db, id="E100")
    return await employee_session(client, "E100")


async def _select(client, headers, target):
    return await client.post(
        f"{API}/shifts/select-date", json={"date": target.isoformat()}, headers=headers,
    )


# ═════════════════════════════════════════════════════════════════════
# DATE SELECTION
# ═════════════════════════════════════════════════════════════════════


async def test_available_dates_today_and_tomorrow(client, employee_headers):
    resp = await client.get(f"{API}/shifts/available-dates", headers=employee_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["today"] == TODAY.isoformat()
    assert body["dates"] == [TODAY.isoformat(), TOMORROW.isoformat()]
    assert body["wizard"]["step"] == "date_selection"


async def test_booked_date_not_offered(client, db, employee_headers):
    await add_entry(db, "E100", TODAY)
    resp = await client.get(f"{API}/shifts/available-dates", headers=employee_headers)
    assert resp.json()["dates"] == [TOMORROW.isoformat()]


async def test_select_date_moves_wizard(client, employee_headers):
    resp = await _select(client, employee_headers, TOMORROW)
    assert resp.status_code == 200
    assert resp.json() == {"step": "shift_selection", "selected_date": TOMORROW.isoformat()}

    state = (await client.get(f"{API}/session", headers=employee_headers)).json()
    assert state["wizard"]["step"] == "shift_selection"


async def test_select_past_date_is_422(client, employee_headers):
    resp = await _select(client, employee_headers, TODAY - timedelta(days=1))
    assert resp.status_code == 422


async def test_select_booked_date_is_409(client, db, employee_headers):
    await add_entry(db, "E100", TODAY)
    resp = await _select(client, employee_headers, TODAY)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "You have already registered for this date."


async def test_change_date(client, employee_headers):
    await _select(client, employee_headers, TODAY)
    resp = await client.post(f"{API}/shifts/change-date", headers=employee_headers)
    assert resp.json() == {"step": "date_selection", "selected_date": None}

    state = (await client.get(f"{API}/session", headers=employee_headers)).json()
    assert state["employee"]["id"] == "E100"


# ═════════════════════════════════════════════════════════════════════
# SUBMISSION
# ═════════════════════════════════════════════════════════════════════


async def test_submit_persists_unapproved_entry(client, employee_headers):
    await _select(client, employee_headers, TODAY)
    resp = await client.post(
        f"{API}/shifts/submit", json={"shift_type": "1st_shift"}, headers=employee_headers,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["entry"]["approved"] is False
    assert body["entry"]["shift_type_label"] == "1st Shift"
    assert body["wizard"]["step"] == "date_selection"

    async with TestSessionFactory() as s:
        entries = (await s.execute(select(ShiftEntry))).scalars().all()
    assert len(entries) == 1
    assert entries[0].date == TODAY
    assert entries[0].approved_by is None


async def test_submit_without_date_is_422(client, employee_headers):
    resp = await client.post(
        f"{API}/shifts/submit", json={"shift_type": "1st_shift"}, headers=employee_headers,
    )
    assert resp.status_code == 422


async def test_other_needs_remark(client, employee_headers):
    await _select(client, employee_headers, TODAY)
    resp = await client.post(
        f"{API}/shifts/submit", json={"shift_type": "other"}, headers=employee_headers,
    )
    assert resp.status_code == 422
    assert "other_remark" in resp.json()["errors"]


async def test_other_with_remark(client, employee_headers):
    await _select(client, employee_headers, TODAY)
    resp = await client.post(
        f"{API}/shifts/submit",
        json={"shift_type": "other", "other_remark": "Plant visit, \"Unit 2\""},
        headers=employee_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["entry"]["other_remark"] == "Plant visit, \"Unit 2\""


async def test_remark_discarded_for_regular_shift(client, employee_headers):
    await _select(client, employee_headers, TODAY)
    resp = await client.post(
        f"{API}/shifts/submit",
        json={"shift_type": "leave", "other_remark": "ignored"},
        headers=employee_headers,
    )
    assert resp.json()["entry"]["other_remark"] is None


async def test_duplicate_at_submit_is_409(client, db, employee_headers):
    await _select(client, employee_headers, TODAY)
    # Booked from another session between the two steps.
    await add_entry(db, "E100", TODAY, ShiftType.second_shift)
    resp = await client.post(
        f"{API}/shifts/submit", json={"shift_type": "1st_shift"}, headers=employee_headers,
    )
    assert resp.status_code == 409


async def test_unique_constraint_backstop_at_submit(client, db, employee_headers):
    await _select(client, employee_headers, TODAY)
    await add_entry(db, "E100", TODAY, ShiftType.second_shift)
    # The booked-date check misses; the (employee_id, date) constraint still holds.
    with patch.object(ShiftEntryStore, "dates_for", AsyncMock(return_value=set())):
        resp = await client.post(
            f"{API}/shifts/submit", json={"shift_type": "1st_shift"}, headers=employee_headers,
        )
    assert resp.status_code == 409
    assert resp.json()["detail"] == "You have already registered for this date."

    async with TestSessionFactory() as s:
        entries = (await s.execute(select(ShiftEntry))).scalars().all()
    assert [e.shift_type for e in entries] == [ShiftType.second_shift]
    state = (await client.get(f"{API}/session", headers=employee_headers)).json()
    assert state["wizard"] == {"step": "shift_selection", "selected_date": TODAY.isoformat()}


async def test_held_date_in_the_past_is_422(client, employee_headers):
    await _select(client, employee_headers, TODAY)
    with patch("shift_tracker.shifts.service.local_today", return_value=TOMORROW):
        resp = await client.post(
            f"{API}/shifts/submit", json={"shift_type": "1st_shift"}, headers=employee_headers,
        )
    assert resp.status_code == 422
    assert "date" in resp.json()["errors"]


async def test_mine_newest_first(client, employee_headers):
    for target, shift in ((TODAY, "1st_shift"), (TOMORROW, "medical")):
        await _select(client, employee_headers, target)
        await client.post(
            f"{API}/shifts/submit", json={"shift_type": shift}, headers=employee_headers,
        )
    resp = await client.get(f"{API}/shifts/mine", headers=employee_headers)
    assert [e["shift_type"] for e in resp.json()] == ["medical", "1st_shift"]


async def test_wizard_reset_when_leaving_employee_view(client, employee_headers):
    await _select(client, employee_headers, TODAY)
    await switch_view(client, employee_headers, "hr")
    state = await switch_view(client, employee_headers, "employee")
    assert state["wizard"] == {"step": "date_selection", "selected_date": None}
    assert state["employee"]["id"] == "E100"


async def test_no_bound_employee_is_403(client):
    headers = await open_view_session(client)
    resp = await client.get(f"{API}/shifts/available-dates", headers=headers)
    assert resp.status_code == 403
