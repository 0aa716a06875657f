"""Shifts router — the two-step shift wizard and the employee's own history."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.auth.dependencies import require_employee_view
from shift_tracker.auth.models import ViewSession
from shift_tracker.database import get_db
from shift_tracker.shifts.schemas import (
    AvailableDatesResponse,
    SelectDateRequest,
    ShiftEntryOut,
    SubmitShiftRequest,
    SubmitShiftResponse,
    WizardState,
)
from shift_tracker.shifts.service import ShiftService

router = APIRouter(prefix="", tags=["shifts"])


# ── Step 1: date selection ──────────────────────────────────────────

@router.get("/available-dates", response_model=AvailableDatesResponse)
async def available_dates(
    session: ViewSession = Depends(require_employee_view),
    db: AsyncSession = Depends(get_db),
):
    return await ShiftService.get_available_dates(db, session)


@router.post("/select-date", response_model=WizardState)
async def select_date(
    body: SelectDateRequest,
    session: ViewSession = Depends(require_employee_view),
    db: AsyncSession = Depends(get_db),
):
    state = await ShiftService.select_date(db, session, body.date)
    await db.flush()
    return state


@router.post("/change-date", response_model=WizardState)
async def change_date(
    session: ViewSession = Depends(require_employee_view),
    db: AsyncSession = Depends(get_db),
):
    state = ShiftService.change_date(session)
    await db.flush()
    return state


# ── Step 2: shift selection ─────────────────────────────────────────

@router.post("/submit", response_model=SubmitShiftResponse, status_code=201)
async def submit_shift(
    body: SubmitShiftRequest,
    session: ViewSession = Depends(require_employee_view),
    db: AsyncSession = Depends(get_db),
):
    result = await ShiftService.submit(db, session, body.shift_type, body.other_remark)
    await db.flush()
    return result


# ── History ─────────────────────────────────────────────────────────

@router.get("/mine", response_model=list[ShiftEntryOut])
async def my_entries(
    session: ViewSession = Depends(require_employee_view),
    db: AsyncSession = Depends(get_db),
):
    return await ShiftService.get_my_entries(db, session)
