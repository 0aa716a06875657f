"""Shift ORM model: ShiftEntry (the Shift Entry Store row)."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shift_tracker.common.constants import ShiftType
from shift_tracker.database import Base


class ShiftEntry(Base):
    __tablename__ = "shift_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[str] = mapped_column(
        sa.String(64),
        sa.ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    shift_type: Mapped[ShiftType] = mapped_column(
        sa.Enum(
            ShiftType,
            name="shift_type",
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
        nullable=False,
    )
    other_remark: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    approved: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    approved_by: Mapped[Optional[str]] = mapped_column(
        sa.String(64), sa.ForeignKey("profiles.id", ondelete="SET NULL")
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    # Relationships
    employee: Mapped["Profile"] = relationship(
        back_populates="shift_entries", foreign_keys=[employee_id]
    )
    approver: Mapped[Optional["Profile"]] = relationship(foreign_keys=[approved_by])

    __table_args__ = (
        sa.UniqueConstraint("employee_id", "date", name="uq_shift_entries_employee_date"),
        sa.CheckConstraint(
            "(shift_type = 'other') = (other_remark IS NOT NULL)",
            name="ck_shift_entries_remark_iff_other",
        ),
        sa.Index("ix_shift_entries_created_at", "created_at"),
        sa.Index("ix_shift_entries_date", "date"),
    )

    def __repr__(self) -> str:
        return f"<ShiftEntry {self.employee_id} {self.date} {self.shift_type.value} approved={self.approved}>"
