"""Review service — filtered entry lists, manager approval, CSV export.

Business logic:
  - Manager scope (own section) is applied before any user filter
  - HR and admin see every entry, read-only
  - Approval is manager-only, set once, never reverted
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.auth.views import ReviewScope
from shift_tracker.common.audit import create_audit_entry
from shift_tracker.common.constants import ProfileRole
from shift_tracker.common.exceptions import AlreadyApprovedError, NotFoundException
from shift_tracker.common.pagination import PaginatedResponse, PaginationParams
from shift_tracker.employees.store import IdentityStore
from shift_tracker.review.export import export_filename, render_csv
from shift_tracker.review.schemas import EntryFilterParams, ReviewEntryOut, SectionEmployeeOut
from shift_tracker.shifts.models import ShiftEntry
from shift_tracker.shifts.store import ShiftEntryStore
from shift_tracker.shifts.wizard import local_today

logger = logging.getLogger(__name__)


def to_review_row(entry: ShiftEntry) -> ReviewEntryOut:
    owner = entry.employee
    approver = entry.approver
    return ReviewEntryOut(
        id=entry.id,
        date=entry.date,
        employee_id=entry.employee_id,
        employee_name=owner.full_name if owner is not None else "Unknown",
        department=owner.department if owner is not None else None,
        section=owner.section if owner is not None else None,
        shift_type=entry.shift_type,
        shift_type_label=entry.shift_type.label,
        other_remark=entry.other_remark,
        approved=entry.approved,
        approved_by=entry.approved_by,
        approved_by_name=approver.full_name if approver is not None else None,
        approved_at=entry.approved_at,
        created_at=entry.created_at,
    )


class ReviewService:
    """Async review operations for manager, HR and admin views."""

    # ── Listing ─────────────────────────────────────────────────────

    @staticmethod
    async def list_entries(
        db: AsyncSession,
        scope: ReviewScope,
        filters: EntryFilterParams,
        params: PaginationParams,
    ) -> PaginatedResponse[ReviewEntryOut]:
        """Scoped, filtered entries, newest first."""

        rows, meta = await ShiftEntryStore(db).query_page(
            params, filters.to_filters(), section=scope.section,
        )
        return PaginatedResponse[ReviewEntryOut](
            data=[to_review_row(e) for e in rows],
            meta=meta,
        )

    @staticmethod
    async def section_employees(
        db: AsyncSession,
        scope: ReviewScope,
    ) -> Sequence[SectionEmployeeOut]:
        """Employees (managers excluded) a reviewer can filter by."""

        profiles = await IdentityStore(db).list_profiles(
            role=ProfileRole.employee,
            section=scope.section,
        )
        return [
            SectionEmployeeOut(id=p.id, full_name=p.full_name, section=p.section)
            for p in profiles
        ]

    # ── Approval ────────────────────────────────────────────────────

    @staticmethod
    async def approve(
        db: AsyncSession,
        scope: ReviewScope,
        entry_id: uuid.UUID,
        *,
        ip: Optional[str] = None,
    ) -> ReviewEntryOut:
        """Approve an entry in the manager's section.

        Entries outside the section are reported as missing.
        """

        store = ShiftEntryStore(db)
        found = await store.query({"id": entry_id}, section=scope.section, order_by=None)
        if not found:
            raise NotFoundException("ShiftEntry", entry_id)
        entry = found[0]
        if entry.approved:
            raise AlreadyApprovedError("ShiftEntry", entry_id)

        approved_at = datetime.now(timezone.utc)
        entry = await store.update(
            entry_id,
            {"approved": True, "approved_by": scope.actor_id, "approved_at": approved_at},
        )
        await db.refresh(entry, attribute_names=["approver"])

        await create_audit_entry(
            db,
            action="approve",
            entity_type="shift_entry",
            entity_id=entry_id,
            actor_view=scope.view.value,
            actor_id=scope.actor_id,
            old_values={"approved": False},
            new_values={"approved": True, "approved_by": scope.actor_id},
            ip_address=ip,
        )
        logger.info(
            "Manager %s approved %s entry of %s",
            scope.actor_id,
            entry.date.isoformat(),
            entry.employee_id,
        )
        return to_review_row(entry)

    # ── Export ──────────────────────────────────────────────────────

    @staticmethod
    async def export(
        db: AsyncSession,
        scope: ReviewScope,
        filters: EntryFilterParams,
        *,
        today: Optional[date] = None,
    ) -> tuple[str, str]:
        """Return ``(filename, csv_text)`` for the scoped, filtered entries."""

        entries = await ShiftEntryStore(db).query(filters.to_filters(), section=scope.section)
        today = today or local_today()
        filename = export_filename(scope.section, today)
        logger.info("Exported %d entries as %s", len(entries), filename)
        return filename, render_csv(entries)
