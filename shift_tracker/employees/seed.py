"""Predefined section managers and the startup bootstrap that seeds them.

Manager ids are reserved: registration can never claim them, and the
bootstrap never overwrites a row that already carries one of these ids.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.common.constants import Department, ProfileRole, Section
from shift_tracker.employees.models import Profile
from shift_tracker.employees.store import IdentityStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeededManager:
    id: str
    full_name: str
    section: Section
    department: Department = Department.engineering

    def to_profile(self) -> Profile:
        return Profile(
            id=self.id,
            full_name=self.full_name,
            department=self.department,
            section=self.section,
            role=ProfileRole.manager,
            is_approved=True,
            pending_registration=False,
        )


SEEDED_MANAGERS: dict[str, SeededManager] = {
    m.id: m
    for m in (
        SeededManager("QC_MGR", "QC Manager", Section.qc),
        SeededManager("RTG_MGR", "RTG Manager", Section.rtg),
        SeededManager("MES_MGR", "MES Manager", Section.mes),
        SeededManager("PLN_MGR", "Planning Manager", Section.planning),
        SeededManager("STR_MGR", "Store Manager", Section.store),
        SeededManager("INF_MGR", "Infra Manager", Section.infra),
    )
}


def is_reserved_id(profile_id: str) -> bool:
    return profile_id in SEEDED_MANAGERS


async def seed_managers(db: AsyncSession) -> list[str]:
    """Insert any seeded manager missing from the Identity Store.

    Returns the ids that were inserted. Existing rows are left untouched.
    """
    store = IdentityStore(db)
    inserted: list[str] = []
    for manager in SEEDED_MANAGERS.values():
        existing = await store.lookup(manager.id)
        if existing is not None:
            if not existing.is_manager:
                logger.warning("Reserved manager id %s is held by a non-manager profile", manager.id)
            continue
        await store.insert(manager.to_profile())
        inserted.append(manager.id)
    if inserted:
        logger.info("Seeded managers: %s", ", ".join(inserted))
    return inserted
