"""Review Pydantic schemas — entry filters and reviewer-facing rows."""


import uuid
from datetime import date, datetime
from typing import Any, Optional

from fastapi import Query
from pydantic import BaseModel

from shift_tracker.common.constants import ApprovalFilter, Department, Section, ShiftType


# ── Filter dependency ───────────────────────────────────────────────

class EntryFilterParams:
    """Inject via ``Depends(EntryFilterParams)``; every predicate is optional."""

    def __init__(
        self,
        date: Optional[date] = Query(default=None, description="Entry date (YYYY-MM-DD)"),
        employee_id: Optional[str] = Query(default=None),
        shift_type: Optional[ShiftType] = Query(default=None),
        approval: ApprovalFilter = Query(default=ApprovalFilter.all),
    ) -> None:
        self.date = date
        self.employee_id = employee_id or None
        self.shift_type = shift_type
        self.approval = approval

    def to_filters(self) -> dict[str, Any]:
        approved = {
            ApprovalFilter.all: None,
            ApprovalFilter.pending: False,
            ApprovalFilter.approved: True,
        }[self.approval]
        return {
            "date": self.date,
            "employee_id": self.employee_id,
            "shift_type": self.shift_type,
            "approved": approved,
        }


# ── Responses ───────────────────────────────────────────────────────

class ReviewEntryOut(BaseModel):
    id: uuid.UUID
    date: date
    employee_id: str
    employee_name: str
    department: Optional[Department] = None
    section: Optional[Section] = None
    shift_type: ShiftType
    shift_type_label: str
    other_remark: Optional[str] = None
    approved: bool
    approved_by: Optional[str] = None
    approved_by_name: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime


class SectionEmployeeOut(BaseModel):
    id: str
    full_name: str
    section: Optional[Section] = None
