"""Shift Entry Store — attendance records over the ``shift_entries`` table."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Optional, Sequence

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shift_tracker.common.exceptions import ConflictError, NotFoundException
from shift_tracker.common.filters import apply_filters, apply_sorting
from shift_tracker.common.pagination import PaginationMeta, PaginationParams, paginate
from shift_tracker.common.retry import store_read, store_write
from shift_tracker.employees.models import Profile
from shift_tracker.shifts.models import ShiftEntry

DEFAULT_ORDER = "-created_at"

_MUTABLE_FIELDS = frozenset({"approved", "approved_by", "approved_at"})


class ShiftEntryStore:
    """Async collaborator holding shift entries."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ── Query building ──────────────────────────────────────────────

    @staticmethod
    def build_query(
        filters: Optional[dict[str, Any]] = None,
        *,
        section: Optional[str] = None,
        order_by: Optional[str] = DEFAULT_ORDER,
    ) -> Select:
        """Entries matching *filters*, restricted to *section* when given.

        The section restriction joins the owning profile and is applied
        before any other predicate.
        """
        query = select(ShiftEntry).options(
            selectinload(ShiftEntry.employee),
            selectinload(ShiftEntry.approver),
        )
        if section is not None:
            query = query.join(ShiftEntry.employee).where(Profile.section == section)
        query = apply_filters(query, ShiftEntry, filters or {})
        query = apply_sorting(query, ShiftEntry, order_by)
        if order_by:
            # Stable order for equal timestamps.
            query = query.order_by(ShiftEntry.id)
        return query

    # ── Reads ───────────────────────────────────────────────────────

    @store_read("shift_entry.get")
    async def get(self, entry_id: uuid.UUID) -> Optional[ShiftEntry]:
        result = await self.db.execute(
            self.build_query({"id": entry_id}, order_by=None)
        )
        return result.scalars().first()

    @store_read("shift_entry.query")
    async def query(
        self,
        filters: Optional[dict[str, Any]] = None,
        *,
        section: Optional[str] = None,
        order_by: Optional[str] = DEFAULT_ORDER,
    ) -> Sequence[ShiftEntry]:
        result = await self.db.execute(
            self.build_query(filters, section=section, order_by=order_by)
        )
        return result.scalars().all()

    @store_read("shift_entry.query_page")
    async def query_page(
        self,
        params: PaginationParams,
        filters: Optional[dict[str, Any]] = None,
        *,
        section: Optional[str] = None,
    ) -> tuple[Sequence[ShiftEntry], PaginationMeta]:
        return await paginate(
            self.db,
            self.build_query(filters, section=section),
            params,
        )

    @store_read("shift_entry.dates_for")
    async def dates_for(self, employee_id: str, *, from_date: Optional[date] = None) -> set[date]:
        """Dates on which *employee_id* already has an entry."""
        query = apply_filters(
            select(ShiftEntry.date),
            ShiftEntry,
            {"employee_id": employee_id, "date__from": from_date},
        )
        return set((await self.db.execute(query)).scalars().all())

    # ── Writes ──────────────────────────────────────────────────────

    @store_write("shift_entry.insert")
    async def insert(self, entry: ShiftEntry) -> ShiftEntry:
        self.db.add(entry)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            # The (employee_id, date) constraint is the backstop for racing submissions.
            raise ConflictError(
                "date",
                entry.date.isoformat(),
                detail="You have already registered for this date.",
            ) from exc
        return entry

    @store_write("shift_entry.update")
    async def update(self, entry_id: uuid.UUID, fields: dict[str, Any]) -> ShiftEntry:
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Shift entry fields are not updatable: {sorted(unknown)}")
        entry = await self.get(entry_id)
        if entry is None:
            raise NotFoundException("ShiftEntry", entry_id)
        for key, value in fields.items():
            setattr(entry, key, value)
        await self.db.flush()
        return entry
