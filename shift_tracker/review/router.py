"""Review router — manager / HR / admin entry lists, approval and export."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.auth.dependencies import require_manager_scope, require_review_scope
from shift_tracker.auth.views import ReviewScope
from shift_tracker.common.pagination import PaginatedResponse, PaginationParams
from shift_tracker.database import get_db
from shift_tracker.review.schemas import EntryFilterParams, ReviewEntryOut, SectionEmployeeOut
from shift_tracker.review.service import ReviewService

router = APIRouter(prefix="", tags=["review"])


# ── GET /entries — Filtered, scoped entries ────────────────────────

@router.get("/entries", response_model=PaginatedResponse[ReviewEntryOut])
async def list_entries(
    filters: EntryFilterParams = Depends(),
    params: PaginationParams = Depends(),
    scope: ReviewScope = Depends(require_review_scope),
    db: AsyncSession = Depends(get_db),
):
    return await ReviewService.list_entries(db, scope, filters, params)


# ── GET /employees — Employee filter options ───────────────────────

@router.get("/employees", response_model=list[SectionEmployeeOut])
async def section_employees(
    scope: ReviewScope = Depends(require_review_scope),
    db: AsyncSession = Depends(get_db),
):
    return await ReviewService.section_employees(db, scope)


# ── POST /entries/{id}/approve — Manager approval ──────────────────

@router.post("/entries/{entry_id}/approve", response_model=ReviewEntryOut)
async def approve_entry(
    entry_id: uuid.UUID,
    request: Request,
    scope: ReviewScope = Depends(require_manager_scope),
    db: AsyncSession = Depends(get_db),
):
    ip = request.client.host if request.client else None
    return await ReviewService.approve(db, scope, entry_id, ip=ip)


# ── GET /export — CSV download ─────────────────────────────────────

@router.get("/export")
async def export_entries(
    filters: EntryFilterParams = Depends(),
    scope: ReviewScope = Depends(require_review_scope),
    db: AsyncSession = Depends(get_db),
):
    filename, content = await ReviewService.export(db, scope, filters)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
