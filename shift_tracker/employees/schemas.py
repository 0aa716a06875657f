"""Employee Pydantic schemas for request / response validation."""


from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from shift_tracker.common.constants import Department, ProfileRole, Section


# ── Requests ────────────────────────────────────────────────────────

class RegistrationRequest(BaseModel):
    id: str
    full_name: str
    department: Department
    section: Optional[Section] = None


# ── Responses ───────────────────────────────────────────────────────

class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    department: Department
    section: Optional[Section] = None
    role: ProfileRole
    is_approved: bool
    pending_registration: bool


class CredentialsOut(BaseModel):
    """Shown once, right after registration."""

    email: str
    password: str


class RegistrationResponse(BaseModel):
    status: Literal["registered", "pending"]
    employee: ProfileOut
    credentials: Optional[CredentialsOut] = None
