"""Identity Store — profile lookup and mutation over the ``profiles`` table."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.common.constants import ProfileRole
from shift_tracker.common.exceptions import ConflictError, NotFoundException
from shift_tracker.common.filters import apply_filters, apply_sorting
from shift_tracker.common.retry import store_read, store_write
from shift_tracker.employees.models import Profile

# Columns a caller may change through ``update``; the id never changes.
_MUTABLE_FIELDS = frozenset(
    {"full_name", "department", "section", "is_approved", "pending_registration", "approved_at"}
)


class IdentityStore:
    """Async collaborator holding employee and manager profiles."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @store_read("profile.lookup")
    async def lookup(self, profile_id: str) -> Optional[Profile]:
        return await self.db.get(Profile, profile_id)

    @store_read("profile.list")
    async def list_profiles(
        self,
        *,
        role: Optional[ProfileRole] = None,
        section: Optional[str] = None,
        pending_only: bool = False,
        approved_only: bool = False,
    ) -> Sequence[Profile]:
        query = apply_filters(
            select(Profile),
            Profile,
            {
                "role": role,
                "section": section,
                "pending_registration": True if pending_only else None,
                "is_approved": True if approved_only else (False if pending_only else None),
            },
        )
        query = apply_sorting(query, Profile, "id")
        return (await self.db.execute(query)).scalars().all()

    @store_write("profile.insert")
    async def insert(self, profile: Profile) -> Profile:
        self.db.add(profile)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            raise ConflictError("id", profile.id) from exc
        return profile

    @store_write("profile.update")
    async def update(self, profile_id: str, fields: dict[str, Any]) -> Profile:
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Profile fields are not updatable: {sorted(unknown)}")
        profile = await self.lookup(profile_id)
        if profile is None:
            raise NotFoundException("Employee", profile_id)
        for key, value in fields.items():
            setattr(profile, key, value)
        await self.db.flush()
        return profile

    @store_write("profile.delete")
    async def delete(self, profile_id: str) -> None:
        profile = await self.lookup(profile_id)
        if profile is None:
            raise NotFoundException("Employee", profile_id)
        await self.db.delete(profile)
        await self.db.flush()
