"""Auth Pydantic schemas for request / response validation."""


from typing import Optional

from pydantic import BaseModel

from shift_tracker.common.constants import RegistrationStatus, Section, View
from shift_tracker.employees.schemas import ProfileOut
from shift_tracker.shifts.schemas import WizardState


# ── Requests ────────────────────────────────────────────────────────

class SwitchViewRequest(BaseModel):
    view: View


class ManagerLoginRequest(BaseModel):
    manager_id: str
    password: str


class AccessCodeRequest(BaseModel):
    code: str


class EmployeeLoginRequest(BaseModel):
    employee_id: str
    password: str


# ── Embedded / Shared ──────────────────────────────────────────────

class ManagerBrief(BaseModel):
    id: str
    full_name: str
    section: Section


# ── Responses ───────────────────────────────────────────────────────

class SessionState(BaseModel):
    active_view: View
    employee: Optional[ProfileOut] = None
    registration_status: RegistrationStatus
    wizard: WizardState
    manager: Optional[ManagerBrief] = None
    hr_authenticated: bool
    admin_authenticated: bool


class SessionTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    session: SessionState
