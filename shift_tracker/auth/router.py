"""Session router — open/close view sessions, switch views, view logins."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.auth.dependencies import get_role_router, get_view_session
from shift_tracker.auth.models import ViewSession
from shift_tracker.auth.schemas import (
    AccessCodeRequest,
    EmployeeLoginRequest,
    ManagerBrief,
    ManagerLoginRequest,
    SessionState,
    SessionTokenResponse,
    SwitchViewRequest,
)
from shift_tracker.auth.service import (
    describe_session,
    login_employee,
    open_session,
    revoke_session,
)
from shift_tracker.auth.views import RoleRouter
from shift_tracker.common.rate_limit import limiter
from shift_tracker.config import settings
from shift_tracker.database import get_db

router = APIRouter(prefix="", tags=["session"])


# ── POST / — Open a view session ───────────────────────────────────

@router.post("", response_model=SessionTokenResponse, status_code=201)
async def create_session(
    request: Request,
    db: AsyncSession = Depends(get_db),
    role_router: RoleRouter = Depends(get_role_router),
):
    ip = request.client.host if request.client else None
    token, session = await open_session(
        db, ip=ip, user_agent=request.headers.get("user-agent"),
    )
    return SessionTokenResponse(
        access_token=token,
        expires_in=settings.SESSION_EXPIRY_HOURS * 3600,
        session=await describe_session(db, role_router, session),
    )


# ── GET / — Current view state ─────────────────────────────────────

@router.get("", response_model=SessionState)
async def get_session(
    session: ViewSession = Depends(get_view_session),
    db: AsyncSession = Depends(get_db),
    role_router: RoleRouter = Depends(get_role_router),
):
    return await describe_session(db, role_router, session)


# ── PUT /view — Switch the active view ─────────────────────────────

@router.put("/view", response_model=SessionState)
async def switch_view(
    body: SwitchViewRequest,
    session: ViewSession = Depends(get_view_session),
    db: AsyncSession = Depends(get_db),
    role_router: RoleRouter = Depends(get_role_router),
):
    role_router.switch_view(session, body.view)
    await db.flush()
    return await describe_session(db, role_router, session)


# ── POST /logout — Revoke the session ──────────────────────────────

@router.post("/logout")
async def logout(
    session: ViewSession = Depends(get_view_session),
    db: AsyncSession = Depends(get_db),
):
    await revoke_session(db, session)
    return {"message": "Logged out successfully"}


# ── Manager view ────────────────────────────────────────────────────

@router.get("/managers", response_model=list[ManagerBrief])
async def list_managers(
    role_router: RoleRouter = Depends(get_role_router),
):
    return [
        ManagerBrief(id=m.id, full_name=m.full_name, section=m.section)
        for m in role_router.managers.values()
    ]


@router.post("/manager/login", response_model=SessionState)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def manager_login(
    request: Request,
    body: ManagerLoginRequest,
    session: ViewSession = Depends(get_view_session),
    db: AsyncSession = Depends(get_db),
    role_router: RoleRouter = Depends(get_role_router),
):
    role_router.login_manager(session, body.manager_id, body.password)
    await db.flush()
    return await describe_session(db, role_router, session)


@router.post("/manager/logout", response_model=SessionState)
async def manager_logout(
    session: ViewSession = Depends(get_view_session),
    db: AsyncSession = Depends(get_db),
    role_router: RoleRouter = Depends(get_role_router),
):
    role_router.logout_manager(session)
    await db.flush()
    return await describe_session(db, role_router, session)


# ── HR / admin gates ────────────────────────────────────────────────

@router.post("/hr/login", response_model=SessionState)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def hr_login(
    request: Request,
    body: AccessCodeRequest,
    session: ViewSession = Depends(get_view_session),
    db: AsyncSession = Depends(get_db),
    role_router: RoleRouter = Depends(get_role_router),
):
    role_router.login_hr(session, body.code)
    await db.flush()
    return await describe_session(db, role_router, session)


@router.post("/admin/login", response_model=SessionState)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def admin_login(
    request: Request,
    body: AccessCodeRequest,
    session: ViewSession = Depends(get_view_session),
    db: AsyncSession = Depends(get_db),
    role_router: RoleRouter = Depends(get_role_router),
):
    role_router.login_admin(session, body.code)
    await db.flush()
    return await describe_session(db, role_router, session)


# ── Employee view ───────────────────────────────────────────────────

@router.post("/employee/login", response_model=SessionState)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def employee_login(
    request: Request,
    body: EmployeeLoginRequest,
    session: ViewSession = Depends(get_view_session),
    db: AsyncSession = Depends(get_db),
    role_router: RoleRouter = Depends(get_role_router),
):
    await login_employee(db, role_router, session, body.employee_id, body.password)
    await db.flush()
    return await describe_session(db, role_router, session)


@router.post("/employee/clear", response_model=SessionState)
async def clear_employee(
    session: ViewSession = Depends(get_view_session),
    db: AsyncSession = Depends(get_db),
    role_router: RoleRouter = Depends(get_role_router),
):
    role_router.require_employee(session)
    role_router.clear_employee(session)
    await db.flush()
    return await describe_session(db, role_router, session)
