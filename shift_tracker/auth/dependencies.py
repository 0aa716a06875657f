"""Auth dependencies — session token validation and view gates."""

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.auth.models import ViewSession
from shift_tracker.auth.service import (
    SessionTokenError,
    decode_session_token,
    load_active_session,
)
from shift_tracker.auth.views import ReviewScope, RoleRouter
from shift_tracker.database import get_db


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


def get_role_router(request: Request) -> RoleRouter:
    return request.app.state.role_router


# ── Core dependency ─────────────────────────────────────────────────

async def get_view_session(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> ViewSession:
    """Validate the session token and return the live ViewSession row."""
    token = _extract_bearer(request)
    try:
        session_id = decode_session_token(token)
    except SessionTokenError as exc:
        raise HTTPException(status_code=401, detail=str(exc))

    session = await load_active_session(db, session_id)
    if session is None:
        raise HTTPException(status_code=401, detail="Session invalid or expired.")
    return session


# ── View gates ──────────────────────────────────────────────────────

async def require_employee_view(
    session: ViewSession = Depends(get_view_session),
    role_router: RoleRouter = Depends(get_role_router),
) -> ViewSession:
    return role_router.require_employee(session)


async def require_review_scope(
    session: ViewSession = Depends(get_view_session),
    role_router: RoleRouter = Depends(get_role_router),
) -> ReviewScope:
    """Manager (own section), HR or admin."""
    return role_router.review_scope(session)


async def require_manager_scope(
    session: ViewSession = Depends(get_view_session),
    role_router: RoleRouter = Depends(get_role_router),
) -> ReviewScope:
    return role_router.require_manager(session)


async def require_directory_scope(
    session: ViewSession = Depends(get_view_session),
    role_router: RoleRouter = Depends(get_role_router),
) -> ReviewScope:
    return role_router.require_directory(session)


async def require_admin_scope(
    session: ViewSession = Depends(get_view_session),
    role_router: RoleRouter = Depends(get_role_router),
) -> ReviewScope:
    return role_router.require_admin(session)
