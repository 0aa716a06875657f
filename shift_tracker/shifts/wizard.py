"""Two-step shift submission state machine, independent of HTTP and storage.

    date_selection ──select_date──▶ shift_selection ──submit──▶ date_selection
          ▲                               │
          └──────────change_date──────────┘

The wizard only decides; persisting the entry and the wizard state is the
caller's job (``ShiftService``).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import AbstractSet, Optional
from zoneinfo import ZoneInfo

from shift_tracker.common.constants import ShiftType, WizardStep
from shift_tracker.common.exceptions import ConflictError, ValidationException
from shift_tracker.config import settings


def local_today(tz_name: Optional[str] = None) -> date:
    """Today's date in the configured business timezone."""
    return datetime.now(ZoneInfo(tz_name or settings.TIMEZONE)).date()


def booking_window(today: date, window_days: int) -> list[date]:
    """Today plus the next *window_days* days."""
    return [today + timedelta(days=offset) for offset in range(max(0, window_days) + 1)]


def available_dates(today: date, booked: AbstractSet[date], window_days: int) -> list[date]:
    """Dates that may be offered for selection: in the window and not yet booked."""
    return [d for d in booking_window(today, window_days) if d not in booked]


def _duplicate_date(target: date) -> ConflictError:
    return ConflictError(
        "date",
        target.isoformat(),
        detail="You have already registered for this date.",
    )


@dataclass(frozen=True)
class ShiftSubmission:
    """A validated entry ready to be persisted."""

    date: date
    shift_type: ShiftType
    other_remark: Optional[str]


class ShiftWizard:
    """Date → shift selection for one employee."""

    def __init__(
        self,
        step: WizardStep = WizardStep.date_selection,
        selected_date: Optional[date] = None,
    ) -> None:
        # A shift_selection step without a held date is not a valid state.
        if step == WizardStep.shift_selection and selected_date is None:
            step = WizardStep.date_selection
        self.step = step
        self.selected_date = selected_date if step == WizardStep.shift_selection else None

    def select_date(
        self,
        target: date,
        *,
        today: date,
        booked: AbstractSet[date],
        window_days: int,
    ) -> None:
        if target < today:
            raise ValidationException({"date": ["Date cannot be earlier than today."]})
        if target > today + timedelta(days=max(0, window_days)):
            raise ValidationException(
                {"date": [f"Date must be within {window_days} day(s) from today."]}
            )
        if target in booked:
            raise _duplicate_date(target)
        self.step = WizardStep.shift_selection
        self.selected_date = target

    def change_date(self) -> None:
        self.step = WizardStep.date_selection
        self.selected_date = None

    def prepare_submission(
        self,
        shift_type: ShiftType,
        other_remark: Optional[str],
        *,
        today: date,
        booked: AbstractSet[date],
    ) -> ShiftSubmission:
        """Validate the second step; the wizard state is left untouched."""

        if self.step != WizardStep.shift_selection or self.selected_date is None:
            raise ValidationException({"date": ["Select a date before choosing a shift."]})
        # The held date may have slipped into the past since it was selected.
        if self.selected_date < today:
            raise ValidationException({"date": ["Date cannot be earlier than today."]})

        remark: Optional[str] = None
        if shift_type == ShiftType.other:
            remark = (other_remark or "").strip()
            if not remark:
                raise ValidationException(
                    {"other_remark": ["A remark is required when the shift type is Other."]}
                )

        # Re-checked here: another session may have booked the date meanwhile.
        if self.selected_date in booked:
            raise _duplicate_date(self.selected_date)

        return ShiftSubmission(
            date=self.selected_date,
            shift_type=shift_type,
            other_remark=remark,
        )

    def complete(self) -> None:
        """Back to date selection after a successful submission."""
        self.change_date()
