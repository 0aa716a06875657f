"""Auth ORM model: ViewSession, the server-side state of one browser session."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from shift_tracker.common.constants import View, WizardStep
from shift_tracker.database import Base


class ViewSession(Base):
    __tablename__ = "view_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    active_view: Mapped[View] = mapped_column(
        sa.Enum(View, name="view_type"), nullable=False, default=View.employee
    )

    # Employee view. Not a foreign key: rejection clears it explicitly.
    employee_id: Mapped[Optional[str]] = mapped_column(sa.String(64), index=True)
    wizard_step: Mapped[WizardStep] = mapped_column(
        sa.Enum(WizardStep, name="wizard_step"),
        nullable=False,
        default=WizardStep.date_selection,
    )
    selected_date: Mapped[Optional[date]] = mapped_column(sa.Date)

    # Manager view
    manager_id: Mapped[Optional[str]] = mapped_column(sa.String(64))
    manager_section: Mapped[Optional[str]] = mapped_column(sa.String(32))

    # HR / admin views
    hr_authenticated: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    admin_authenticated: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)

    ip_address: Mapped[Optional[str]] = mapped_column(sa.String(45))
    user_agent: Mapped[Optional[str]] = mapped_column(sa.Text)
    expires_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False
    )
    is_revoked: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return f"<ViewSession {self.id} view={self.active_view.value if self.active_view else '?'}>"
