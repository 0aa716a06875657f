"""Employee registration service.

Registration state machine per employee id:

    unregistered → submitted (pending) → approved | rejected

This module owns the first transition; approval and rejection live in
``shift_tracker.admin.service``.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.common.constants import Department, ProfileRole
from shift_tracker.common.exceptions import ConflictError, ValidationException
from shift_tracker.employees.credentials import derive_credentials
from shift_tracker.employees.models import Profile
from shift_tracker.employees.schemas import (
    CredentialsOut,
    ProfileOut,
    RegistrationRequest,
    RegistrationResponse,
)
from shift_tracker.employees.seed import is_reserved_id
from shift_tracker.employees.store import IdentityStore

logger = logging.getLogger(__name__)


class RegistrationService:
    """Self-registration of employees."""

    @staticmethod
    def _validate(data: RegistrationRequest) -> RegistrationRequest:
        """Trim input, drop a stray section, and collect field errors."""

        employee_id = data.id.strip()
        full_name = data.full_name.strip()
        is_engineering = data.department == Department.engineering
        section = data.section if is_engineering else None

        errors: dict[str, list[str]] = {}
        if not employee_id:
            errors["id"] = ["Employee ID is required."]
        if not full_name:
            errors["full_name"] = ["Full name is required."]
        if is_engineering and section is None:
            errors["section"] = ["Section is required for the Engineering department."]
        if errors:
            raise ValidationException(errors)

        return RegistrationRequest(
            id=employee_id,
            full_name=full_name,
            department=data.department,
            section=section,
        )

    @staticmethod
    async def register(db: AsyncSession, data: RegistrationRequest) -> RegistrationResponse:
        """Create a pending employee and hand out derived credentials once.

        An id that is already registered but still pending yields the
        ``pending`` outcome instead of a second record; any other existing
        id (approved employee, seeded manager) is a conflict.
        """

        data = RegistrationService._validate(data)

        if is_reserved_id(data.id):
            raise ConflictError("id", data.id)

        store = IdentityStore(db)
        existing = await store.lookup(data.id)
        if existing is not None:
            if existing.is_manager or existing.is_approved:
                raise ConflictError("id", data.id)
            logger.info("Registration for %s already pending", data.id)
            return RegistrationResponse(
                status="pending",
                employee=ProfileOut.model_validate(existing),
            )

        profile = await store.insert(
            Profile(
                id=data.id,
                full_name=data.full_name,
                department=data.department,
                section=data.section,
                role=ProfileRole.employee,
                is_approved=False,
                pending_registration=True,
            )
        )
        credentials = derive_credentials(profile.id)
        logger.info("Registered employee %s (%s)", profile.id, profile.department.value)

        return RegistrationResponse(
            status="registered",
            employee=ProfileOut.model_validate(profile),
            credentials=CredentialsOut(email=credentials.email, password=credentials.password),
        )
