"""Employee ORM model: Profile (the Identity Store row)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shift_tracker.common.constants import Department, ProfileRole, Section
from shift_tracker.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    # Human-assigned employee code; unique across managers and employees.
    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    full_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    department: Mapped[Department] = mapped_column(
        sa.Enum(
            Department,
            name="department",
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
        nullable=False,
    )
    section: Mapped[Optional[Section]] = mapped_column(
        sa.Enum(
            Section,
            name="section",
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
    )
    role: Mapped[ProfileRole] = mapped_column(
        sa.Enum(ProfileRole, name="profile_role"),
        nullable=False,
        default=ProfileRole.employee,
    )
    is_approved: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    pending_registration: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    # Relationships
    shift_entries: Mapped[list["ShiftEntry"]] = relationship(
        back_populates="employee",
        foreign_keys="ShiftEntry.employee_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        sa.CheckConstraint(
            "(department = 'Engineering') = (section IS NOT NULL)",
            name="ck_profiles_section_iff_engineering",
        ),
    )

    @property
    def is_manager(self) -> bool:
        return self.role == ProfileRole.manager

    def __repr__(self) -> str:
        return f"<Profile {self.id} {self.role.value if self.role else '?'} approved={self.is_approved}>"
