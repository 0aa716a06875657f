"""Admin service — registration approval/rejection, directory, password changes."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.admin.schemas import PasswordChangeResponse, RejectionResponse
from shift_tracker.auth.credentials import CredentialStore
from shift_tracker.auth.service import clear_employee_sessions
from shift_tracker.auth.views import ReviewScope
from shift_tracker.common.audit import create_audit_entry
from shift_tracker.common.exceptions import (
    AlreadyApprovedError,
    ConflictError,
    NotFoundException,
    ValidationException,
)
from shift_tracker.config import settings
from shift_tracker.employees.models import Profile
from shift_tracker.employees.schemas import ProfileOut
from shift_tracker.employees.store import IdentityStore

logger = logging.getLogger(__name__)


class AdminService:
    """Static service class for admin operations."""

    # ── Registrations ───────────────────────────────────────────────

    @staticmethod
    async def list_pending(db: AsyncSession) -> Sequence[ProfileOut]:
        profiles = await IdentityStore(db).list_profiles(pending_only=True)
        return [ProfileOut.model_validate(p) for p in profiles]

    @staticmethod
    async def _existing_profile(store: IdentityStore, profile_id: str) -> Profile:
        profile = await store.lookup(profile_id)
        if profile is None:
            raise NotFoundException("Employee", profile_id)
        return profile

    @staticmethod
    async def approve_employee(
        db: AsyncSession,
        scope: ReviewScope,
        profile_id: str,
        *,
        ip: Optional[str] = None,
    ) -> ProfileOut:
        store = IdentityStore(db)
        profile = await AdminService._existing_profile(store, profile_id)
        if profile.is_approved or not profile.pending_registration:
            raise AlreadyApprovedError("Employee", profile_id)

        profile = await store.update(
            profile_id,
            {
                "is_approved": True,
                "pending_registration": False,
                "approved_at": datetime.now(timezone.utc),
            },
        )
        await create_audit_entry(
            db,
            action="approve",
            entity_type="profile",
            entity_id=profile_id,
            actor_view=scope.view.value,
            old_values={"is_approved": False, "pending_registration": True},
            new_values={"is_approved": True, "pending_registration": False},
            ip_address=ip,
        )
        logger.info("Approved registration of %s", profile_id)
        return ProfileOut.model_validate(profile)

    @staticmethod
    async def reject_employee(
        db: AsyncSession,
        scope: ReviewScope,
        credentials: CredentialStore,
        profile_id: str,
        *,
        ip: Optional[str] = None,
    ) -> RejectionResponse:
        """Delete a pending profile and unbind it from every view session.

        Only pending registrations can be rejected; approved employees keep
        their profile and shift history. The credential store is touched only
        after the transaction commits.
        """

        store = IdentityStore(db)
        profile = await AdminService._existing_profile(store, profile_id)
        if profile.is_manager:
            raise ConflictError(
                "id", profile_id, detail=f"Manager '{profile_id}' cannot be rejected.",
            )
        if profile.is_approved or not profile.pending_registration:
            raise AlreadyApprovedError("Employee", profile_id)
        snapshot = {
            "full_name": profile.full_name,
            "department": profile.department.value,
            "section": profile.section.value if profile.section else None,
            "is_approved": profile.is_approved,
        }

        await store.delete(profile_id)
        cleared = await clear_employee_sessions(db, profile_id)

        await create_audit_entry(
            db,
            action="reject",
            entity_type="profile",
            entity_id=profile_id,
            actor_view=scope.view.value,
            old_values=snapshot,
            ip_address=ip,
        )
        await db.commit()
        credentials.discard(profile_id)
        logger.info("Rejected registration of %s (%d sessions cleared)", profile_id, cleared)
        return RejectionResponse(id=profile_id, sessions_cleared=cleared)

    # ── Directory ───────────────────────────────────────────────────

    @staticmethod
    async def list_directory(db: AsyncSession) -> Sequence[ProfileOut]:
        profiles = await IdentityStore(db).list_profiles()
        return [ProfileOut.model_validate(p) for p in profiles]

    # ── Passwords ───────────────────────────────────────────────────

    @staticmethod
    async def change_password(
        db: AsyncSession,
        scope: ReviewScope,
        credentials: CredentialStore,
        profile_id: str,
        new_password: str,
        *,
        ip: Optional[str] = None,
    ) -> PasswordChangeResponse:
        """Set a stored password for an approved manager or employee.

        The credential store changes only once the audit entry is committed.
        """

        profile = await IdentityStore(db).lookup(profile_id)
        if profile is None or not profile.is_approved or profile.pending_registration:
            raise NotFoundException("Employee", profile_id)
        if len(new_password) < settings.MIN_PASSWORD_LENGTH:
            raise ValidationException(
                {
                    "new_password": [
                        f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters long."
                    ]
                }
            )

        await create_audit_entry(
            db,
            action="password_change",
            entity_type="profile",
            entity_id=profile_id,
            actor_view=scope.view.value,
            ip_address=ip,
        )
        await db.commit()
        credentials.set_password(profile_id, new_password)
        logger.info("Password changed for %s", profile_id)
        return PasswordChangeResponse(profile_id=profile_id)
