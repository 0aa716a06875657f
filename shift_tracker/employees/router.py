"""Employees router — self-registration from the employee view."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.auth.dependencies import get_role_router, require_employee_view
from shift_tracker.auth.models import ViewSession
from shift_tracker.auth.views import RoleRouter
from shift_tracker.database import get_db
from shift_tracker.employees.schemas import RegistrationRequest, RegistrationResponse
from shift_tracker.employees.service import RegistrationService

router = APIRouter(prefix="", tags=["employees"])


# ── POST /register — Self-registration ─────────────────────────────

@router.post("/register", response_model=RegistrationResponse, status_code=201)
async def register(
    body: RegistrationRequest,
    session: ViewSession = Depends(require_employee_view),
    db: AsyncSession = Depends(get_db),
    role_router: RoleRouter = Depends(get_role_router),
):
    result = await RegistrationService.register(db, body)
    if result.status == "registered":
        role_router.bind_employee(session, result.employee.id)
        await db.flush()
    return result
