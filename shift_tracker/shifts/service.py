"""Shift submission service — drives the wizard for the employee bound to a session.

Business logic:
  - Only approved employees reach the wizard; pending ones are blocked
  - Date selection limited to today + booking window, minus booked dates
  - Submission re-checks the one-entry-per-date rule before persisting
  - The wizard step lives on the view session between requests
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.auth.models import ViewSession
from shift_tracker.common.constants import ShiftType
from shift_tracker.common.exceptions import ForbiddenException
from shift_tracker.config import settings
from shift_tracker.employees.models import Profile
from shift_tracker.employees.store import IdentityStore
from shift_tracker.shifts.models import ShiftEntry
from shift_tracker.shifts.schemas import (
    AvailableDatesResponse,
    ShiftEntryOut,
    SubmitShiftResponse,
    WizardState,
)
from shift_tracker.shifts.store import ShiftEntryStore
from shift_tracker.shifts.wizard import ShiftWizard, available_dates, local_today

logger = logging.getLogger(__name__)


class ShiftService:
    """Async shift operations for the employee view."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    async def _approved_employee(db: AsyncSession, view_session: ViewSession) -> Profile:
        """Resolve the session's employee; block anyone not yet approved."""

        if view_session.employee_id is None:
            raise ForbiddenException("Register or sign in as an employee first.")
        profile = await IdentityStore(db).lookup(view_session.employee_id)
        if profile is None:
            raise ForbiddenException("Register or sign in as an employee first.")
        if not profile.is_approved:
            raise ForbiddenException(
                "Your registration is pending approval from the administrator. "
                "Please check back later."
            )
        return profile

    @staticmethod
    def _wizard(view_session: ViewSession) -> ShiftWizard:
        return ShiftWizard(view_session.wizard_step, view_session.selected_date)

    @staticmethod
    def _save_wizard(view_session: ViewSession, wizard: ShiftWizard) -> WizardState:
        view_session.wizard_step = wizard.step
        view_session.selected_date = wizard.selected_date
        return WizardState(step=wizard.step, selected_date=wizard.selected_date)

    # ── Date selection ──────────────────────────────────────────────

    @staticmethod
    async def get_available_dates(
        db: AsyncSession,
        view_session: ViewSession,
        *,
        today: Optional[date] = None,
    ) -> AvailableDatesResponse:
        """Dates the employee may pick, with booked dates left out."""

        profile = await ShiftService._approved_employee(db, view_session)
        today = today or local_today()
        booked = await ShiftEntryStore(db).dates_for(profile.id, from_date=today)
        wizard = ShiftService._wizard(view_session)
        return AvailableDatesResponse(
            today=today,
            dates=available_dates(today, booked, settings.SHIFT_BOOKING_WINDOW_DAYS),
            wizard=WizardState(step=wizard.step, selected_date=wizard.selected_date),
        )

    @staticmethod
    async def select_date(
        db: AsyncSession,
        view_session: ViewSession,
        target: date,
        *,
        today: Optional[date] = None,
    ) -> WizardState:
        profile = await ShiftService._approved_employee(db, view_session)
        today = today or local_today()
        booked = await ShiftEntryStore(db).dates_for(profile.id, from_date=today)

        wizard = ShiftService._wizard(view_session)
        wizard.select_date(
            target,
            today=today,
            booked=booked,
            window_days=settings.SHIFT_BOOKING_WINDOW_DAYS,
        )
        return ShiftService._save_wizard(view_session, wizard)

    @staticmethod
    def change_date(view_session: ViewSession) -> WizardState:
        """Back to date selection; the employee stays bound."""

        wizard = ShiftService._wizard(view_session)
        wizard.change_date()
        return ShiftService._save_wizard(view_session, wizard)

    # ── Submission ──────────────────────────────────────────────────

    @staticmethod
    async def submit(
        db: AsyncSession,
        view_session: ViewSession,
        shift_type: ShiftType,
        other_remark: Optional[str] = None,
        *,
        today: Optional[date] = None,
    ) -> SubmitShiftResponse:
        """Persist the held date's entry and return to date selection."""

        profile = await ShiftService._approved_employee(db, view_session)
        store = ShiftEntryStore(db)
        wizard = ShiftService._wizard(view_session)

        booked = (
            await store.dates_for(profile.id, from_date=wizard.selected_date)
            if wizard.selected_date is not None
            else set()
        )
        submission = wizard.prepare_submission(
            shift_type, other_remark, today=today or local_today(), booked=booked,
        )

        entry = await store.insert(
            ShiftEntry(
                employee_id=profile.id,
                date=submission.date,
                shift_type=submission.shift_type,
                other_remark=submission.other_remark,
                approved=False,
            )
        )
        wizard.complete()
        state = ShiftService._save_wizard(view_session, wizard)
        logger.info(
            "Employee %s submitted %s for %s",
            profile.id,
            submission.shift_type.value,
            submission.date.isoformat(),
        )
        return SubmitShiftResponse(entry=ShiftEntryOut.model_validate(entry), wizard=state)

    # ── History ─────────────────────────────────────────────────────

    @staticmethod
    async def get_my_entries(
        db: AsyncSession,
        view_session: ViewSession,
    ) -> Sequence[ShiftEntryOut]:
        """The session employee's own entries, newest first."""

        profile = await ShiftService._approved_employee(db, view_session)
        entries = await ShiftEntryStore(db).query({"employee_id": profile.id})
        return [ShiftEntryOut.model_validate(e) for e in entries]
