"""Role router — which of the four views a session shows and what it may reach.

Views are mutually exclusive. Switching clears every other view's transient
authentication: the manager is logged out, HR/admin flags drop, and the shift
wizard falls back to date selection. The bound employee survives a switch.

All methods mutate a ``ViewSession`` in memory; persisting it is the
caller's job, so the rules are testable without a database.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from shift_tracker.auth.credentials import CredentialStore
from shift_tracker.auth.models import ViewSession
from shift_tracker.common.constants import View, WizardStep
from shift_tracker.common.exceptions import (
    ForbiddenException,
    InvalidCredentials,
    ValidationException,
)
from shift_tracker.employees.credentials import derive_default_password
from shift_tracker.employees.seed import SEEDED_MANAGERS, SeededManager

logger = logging.getLogger(__name__)

_VIEW_LABELS = {
    View.employee: "employee",
    View.manager: "manager",
    View.hr: "HR",
    View.admin: "admin",
}


@dataclass(frozen=True)
class ReviewScope:
    """Who is reviewing, and which section they are confined to (None = all)."""

    view: View
    actor_id: Optional[str]
    section: Optional[str]

    @property
    def is_manager(self) -> bool:
        return self.view == View.manager


class RoleRouter:
    """View switching, logins and access gates for view sessions."""

    def __init__(
        self,
        credentials: CredentialStore,
        managers: Mapping[str, SeededManager] = SEEDED_MANAGERS,
    ) -> None:
        self.credentials = credentials
        self.managers = managers

    # ── Session state ───────────────────────────────────────────────

    @staticmethod
    def new_session(
        expires_at: datetime,
        *,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> ViewSession:
        """A fresh session on the employee view with nothing authenticated."""
        return ViewSession(
            active_view=View.employee,
            employee_id=None,
            wizard_step=WizardStep.date_selection,
            selected_date=None,
            manager_id=None,
            manager_section=None,
            hr_authenticated=False,
            admin_authenticated=False,
            ip_address=ip_address,
            user_agent=user_agent,
            expires_at=expires_at,
            is_revoked=False,
        )

    @staticmethod
    def reset_wizard(session: ViewSession) -> None:
        session.wizard_step = WizardStep.date_selection
        session.selected_date = None

    def switch_view(self, session: ViewSession, view: View) -> None:
        session.active_view = view
        if view != View.manager:
            session.manager_id = None
            session.manager_section = None
        if view != View.hr:
            session.hr_authenticated = False
        if view != View.admin:
            session.admin_authenticated = False
        if view != View.employee:
            self.reset_wizard(session)

    @staticmethod
    def _require_view(session: ViewSession, view: View) -> None:
        if session.active_view != view:
            raise ForbiddenException(f"Switch to the {_VIEW_LABELS[view]} view first.")

    # ── Logins ──────────────────────────────────────────────────────

    def login_manager(self, session: ViewSession, manager_id: str, password: str) -> SeededManager:
        """Bind the session to a manager and their fixed section."""

        self._require_view(session, View.manager)
        manager = self.managers.get(manager_id)
        # Verify even for unknown ids so both failures look the same.
        valid = self.credentials.verify(manager_id, password)
        if manager is None or not valid:
            logger.info("Manager login failed for %r", manager_id)
            raise InvalidCredentials()
        session.manager_id = manager.id
        session.manager_section = manager.section.value
        logger.info("Manager %s logged in (section %s)", manager.id, manager.section.value)
        return manager

    def logout_manager(self, session: ViewSession) -> None:
        session.manager_id = None
        session.manager_section = None

    @staticmethod
    def _require_code(code: str) -> None:
        # Stub gate: any non-empty access code is accepted.
        if not code or not code.strip():
            raise ValidationException({"code": ["Access code is required."]})

    def login_hr(self, session: ViewSession, code: str) -> None:
        self._require_view(session, View.hr)
        self._require_code(code)
        session.hr_authenticated = True

    def login_admin(self, session: ViewSession, code: str) -> None:
        self._require_view(session, View.admin)
        self._require_code(code)
        session.admin_authenticated = True

    def verify_employee_password(self, employee_id: str, password: str) -> bool:
        """Stored override if an admin set one, else the derived default."""
        if self.credentials.has(employee_id):
            return self.credentials.verify(employee_id, password)
        expected = derive_default_password(employee_id)
        return hmac.compare_digest(expected.encode(), password.encode())

    def bind_employee(self, session: ViewSession, employee_id: str) -> None:
        self._require_view(session, View.employee)
        session.employee_id = employee_id
        self.reset_wizard(session)

    def clear_employee(self, session: ViewSession) -> None:
        """Back to the registration screen."""
        session.employee_id = None
        self.reset_wizard(session)

    # ── Gates ───────────────────────────────────────────────────────

    def require_employee(self, session: ViewSession) -> ViewSession:
        self._require_view(session, View.employee)
        return session

    def require_manager(self, session: ViewSession) -> ReviewScope:
        self._require_view(session, View.manager)
        if session.manager_id is None or session.manager_section is None:
            raise ForbiddenException("Manager login required.")
        return ReviewScope(View.manager, session.manager_id, session.manager_section)

    def require_admin(self, session: ViewSession) -> ReviewScope:
        self._require_view(session, View.admin)
        if not session.admin_authenticated:
            raise ForbiddenException("Admin login required.")
        return ReviewScope(View.admin, None, None)

    def require_hr(self, session: ViewSession) -> ReviewScope:
        self._require_view(session, View.hr)
        if not session.hr_authenticated:
            raise ForbiddenException("HR login required.")
        return ReviewScope(View.hr, None, None)

    def require_directory(self, session: ViewSession) -> ReviewScope:
        if session.active_view == View.hr:
            return self.require_hr(session)
        if session.active_view == View.admin:
            return self.require_admin(session)
        raise ForbiddenException("Switch to the HR or admin view first.")

    def review_scope(self, session: ViewSession) -> ReviewScope:
        """Managers see their own section; HR and admin see everything."""
        if session.active_view == View.manager:
            return self.require_manager(session)
        if session.active_view == View.hr:
            return self.require_hr(session)
        if session.active_view == View.admin:
            return self.require_admin(session)
        raise ForbiddenException("Switch to the manager, HR or admin view first.")
