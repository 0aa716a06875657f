"""Auth service — view-session tokens, session lifecycle, employee login."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.auth.models import ViewSession
from shift_tracker.auth.schemas import ManagerBrief, SessionState
from shift_tracker.auth.views import RoleRouter
from shift_tracker.common.constants import RegistrationStatus, View, WizardStep
from shift_tracker.common.exceptions import InvalidCredentials
from shift_tracker.config import settings
from shift_tracker.employees.schemas import ProfileOut
from shift_tracker.employees.store import IdentityStore
from shift_tracker.shifts.schemas import WizardState

logger = logging.getLogger(__name__)

TOKEN_TYPE = "view_session"


class SessionTokenError(Exception):
    """The bearer token is missing, malformed, expired, or of the wrong type."""


# ── JWT helpers ─────────────────────────────────────────────────────

def create_session_token(session_id: uuid.UUID, expires_at: datetime) -> str:
    payload = {
        "sub": str(session_id),
        "type": TOKEN_TYPE,
        "exp": expires_at,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_session_token(token: str) -> uuid.UUID:
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError as exc:
        raise SessionTokenError("Session has expired.") from exc
    except JWTError as exc:
        raise SessionTokenError("Invalid token.") from exc

    if payload.get("type") != TOKEN_TYPE:
        raise SessionTokenError("Invalid token type.")
    try:
        return uuid.UUID(payload["sub"])
    except (KeyError, ValueError) as exc:
        raise SessionTokenError("Invalid token.") from exc


# ── Session lifecycle ───────────────────────────────────────────────

async def open_session(
    db: AsyncSession,
    *,
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> tuple[str, ViewSession]:
    """Persist a fresh view session and return (token, session)."""
    expires_at = datetime.now(timezone.utc) + timedelta(hours=settings.SESSION_EXPIRY_HOURS)
    session = RoleRouter.new_session(expires_at, ip_address=ip, user_agent=user_agent)
    db.add(session)
    await db.flush()
    return create_session_token(session.id, expires_at), session


async def load_active_session(db: AsyncSession, session_id: uuid.UUID) -> Optional[ViewSession]:
    result = await db.execute(
        select(ViewSession).where(
            ViewSession.id == session_id,
            ViewSession.is_revoked.is_(False),
            ViewSession.expires_at > datetime.now(timezone.utc),
        ),
    )
    return result.scalars().first()


async def revoke_session(db: AsyncSession, session: ViewSession) -> None:
    session.is_revoked = True
    await db.flush()


async def clear_employee_sessions(db: AsyncSession, employee_id: str) -> int:
    """Unbind *employee_id* from every session (used when a registration is rejected)."""
    result = await db.execute(
        update(ViewSession)
        .where(ViewSession.employee_id == employee_id)
        .values(
            employee_id=None,
            wizard_step=WizardStep.date_selection,
            selected_date=None,
        )
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount or 0


# ── Employee login ──────────────────────────────────────────────────

async def login_employee(
    db: AsyncSession,
    role_router: RoleRouter,
    session: ViewSession,
    employee_id: str,
    password: str,
) -> None:
    """Bind an existing employee to the session's employee view."""
    role_router.require_employee(session)
    employee_id = employee_id.strip()
    profile = await IdentityStore(db).lookup(employee_id) if employee_id else None
    valid = role_router.verify_employee_password(employee_id, password)
    if profile is None or profile.is_manager or not valid:
        logger.info("Employee login failed for %r", employee_id)
        raise InvalidCredentials()
    role_router.bind_employee(session, profile.id)
    logger.info("Employee %s signed in", profile.id)


# ── Read model ──────────────────────────────────────────────────────

async def describe_session(
    db: AsyncSession,
    role_router: RoleRouter,
    session: ViewSession,
) -> SessionState:
    """What the client should render for this session."""
    employee = None
    status = RegistrationStatus.none
    if session.employee_id is not None:
        profile = await IdentityStore(db).lookup(session.employee_id)
        if profile is not None:
            employee = ProfileOut.model_validate(profile)
            status = RegistrationStatus.approved if profile.is_approved else RegistrationStatus.pending

    manager = None
    if session.active_view == View.manager and session.manager_id is not None:
        seeded = role_router.managers.get(session.manager_id)
        if seeded is not None:
            manager = ManagerBrief(id=seeded.id, full_name=seeded.full_name, section=seeded.section)

    return SessionState(
        active_view=session.active_view,
        employee=employee,
        registration_status=status,
        wizard=WizardState(step=session.wizard_step, selected_date=session.selected_date),
        manager=manager,
        hr_authenticated=session.hr_authenticated,
        admin_authenticated=session.admin_authenticated,
    )
