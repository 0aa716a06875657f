"""Admin router — pending registrations, directory, password changes.

Everything here requires an authenticated admin session, except the
directory, which HR may read as well.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.admin.schemas import (
    PasswordChangeRequest,
    PasswordChangeResponse,
    RejectionResponse,
)
from shift_tracker.admin.service import AdminService
from shift_tracker.auth.dependencies import (
    get_role_router,
    require_admin_scope,
    require_directory_scope,
)
from shift_tracker.auth.views import ReviewScope, RoleRouter
from shift_tracker.database import get_db
from shift_tracker.employees.schemas import ProfileOut

router = APIRouter(prefix="", tags=["admin"])


def _client_ip(request: Request):
    return request.client.host if request.client else None


# ═══════════════════════════════════════════════════════════════════
# REGISTRATIONS
# ═══════════════════════════════════════════════════════════════════

@router.get("/registrations", response_model=list[ProfileOut])
async def list_pending_registrations(
    _scope: ReviewScope = Depends(require_admin_scope),
    db: AsyncSession = Depends(get_db),
):
    """Employees waiting for approval."""
    return await AdminService.list_pending(db)


@router.post("/registrations/{profile_id}/approve", response_model=ProfileOut)
async def approve_registration(
    profile_id: str,
    request: Request,
    scope: ReviewScope = Depends(require_admin_scope),
    db: AsyncSession = Depends(get_db),
):
    return await AdminService.approve_employee(db, scope, profile_id, ip=_client_ip(request))


@router.post("/registrations/{profile_id}/reject", response_model=RejectionResponse)
async def reject_registration(
    profile_id: str,
    request: Request,
    scope: ReviewScope = Depends(require_admin_scope),
    db: AsyncSession = Depends(get_db),
    role_router: RoleRouter = Depends(get_role_router),
):
    """Delete the registration and sign the employee out everywhere."""
    return await AdminService.reject_employee(
        db, scope, role_router.credentials, profile_id, ip=_client_ip(request),
    )


# ═══════════════════════════════════════════════════════════════════
# DIRECTORY
# ═══════════════════════════════════════════════════════════════════

@router.get("/employees", response_model=list[ProfileOut])
async def list_directory(
    _scope: ReviewScope = Depends(require_directory_scope),
    db: AsyncSession = Depends(get_db),
):
    """All profiles, managers included."""
    return await AdminService.list_directory(db)


# ═══════════════════════════════════════════════════════════════════
# PASSWORDS
# ═══════════════════════════════════════════════════════════════════

@router.post("/passwords", response_model=PasswordChangeResponse)
async def change_password(
    body: PasswordChangeRequest,
    request: Request,
    scope: ReviewScope = Depends(require_admin_scope),
    db: AsyncSession = Depends(get_db),
    role_router: RoleRouter = Depends(get_role_router),
):
    return await AdminService.change_password(
        db,
        scope,
        role_router.credentials,
        body.profile_id,
        body.new_password,
        ip=_client_ip(request),
    )
