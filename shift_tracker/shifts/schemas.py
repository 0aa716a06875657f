"""Shift Pydantic schemas for request / response validation."""


import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, computed_field

from shift_tracker.common.constants import ShiftType, WizardStep


# ── Requests ────────────────────────────────────────────────────────

class SelectDateRequest(BaseModel):
    date: date


class SubmitShiftRequest(BaseModel):
    shift_type: ShiftType
    other_remark: Optional[str] = None


# ── Responses ───────────────────────────────────────────────────────

class WizardState(BaseModel):
    step: WizardStep
    selected_date: Optional[date] = None


class AvailableDatesResponse(BaseModel):
    today: date
    dates: list[date]
    wizard: WizardState


class ShiftEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: str
    date: date
    shift_type: ShiftType
    other_remark: Optional[str] = None
    created_at: datetime
    approved: bool
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None

    @computed_field  # type: ignore[misc]
    @property
    def shift_type_label(self) -> str:
        return self.shift_type.label


class SubmitShiftResponse(BaseModel):
    entry: ShiftEntryOut
    wizard: WizardState
