"""Tests for common utilities — filters, pagination, and store retries."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from shift_tracker.common.constants import Department, Section
from shift_tracker.common.exceptions import StoreError
from shift_tracker.common.filters import _get_column, apply_filters, apply_sorting
from shift_tracker.common.pagination import PaginationParams, paginate
from shift_tracker.common.retry import is_transient_error, store_read, store_write
from shift_tracker.config import settings
from shift_tracker.employees.models import Profile
from tests.conftest import API, add_profile, employee_session


@pytest.fixture
async def people(db: AsyncSession):
    await add_profile(db, id="E100", full_name="Asha Rao", section=Section.qc)
    await add_profile(db, id="E101", full_name="Vikram S", section=Section.qc, approved=False)
    await add_profile(db, id="E200", full_name="Meera N", section=Section.rtg)
    await add_profile(db, id="F300", full_name="John P", department=Department.finance)


async def _ids(db: AsyncSession, query) -> list[str]:
    return list((await db.execute(query)).scalars().all())


# ═════════════════════════════════════════════════════════════════════
# FILTER TESTS
# ═════════════════════════════════════════════════════════════════════


class TestApplyFilters:

    async def test_filter_by_equality(self, db, people):
        query = apply_filters(select(Profile.id), Profile, {"section": Section.qc})
        assert sorted(await _ids(db, query)) == ["E100", "E101"]

    async def test_filters_combine(self, db, people):
        query = apply_filters(
            select(Profile.id), Profile, {"section": Section.qc, "is_approved": True},
        )
        assert await _ids(db, query) == ["E100"]

    async def test_none_values_skipped(self, db, people):
        query = apply_filters(select(Profile.id), Profile, {"section": None})
        assert len(await _ids(db, query)) == 4

    async def test_filter_by_in(self, db, people):
        query = apply_filters(select(Profile.id), Profile, {"id__in": ["E200", "F300"]})
        assert sorted(await _ids(db, query)) == ["E200", "F300"]

    async def test_filter_by_from_to_range(self, db, people):
        query = apply_filters(
            select(Profile.id), Profile, {"id__from": "E101", "id__to": "E200"},
        )
        assert sorted(await _ids(db, query)) == ["E101", "E200"]

    async def test_unknown_column_ignored(self, db, people):
        query = apply_filters(select(Profile.id), Profile, {"nope": "x"})
        assert len(await _ids(db, query)) == 4


class TestApplySorting:

    async def test_sort_ascending(self, db, people):
        query = apply_sorting(select(Profile.id), Profile, "full_name")
        assert await _ids(db, query) == ["E100", "F300", "E200", "E101"]

    async def test_sort_descending(self, db, people):
        query = apply_sorting(select(Profile.id), Profile, "-id")
        assert await _ids(db, query) == ["F300", "E200", "E101", "E100"]

    def test_sort_none_is_noop(self):
        query = select(Profile.id)
        assert apply_sorting(query, Profile, None) is query
        assert apply_sorting(query, Profile, "-bogus") is query


def test_get_column_only_returns_mapped_attributes():
    assert _get_column(Profile, "full_name") is Profile.full_name
    assert _get_column(Profile, "is_manager") is None
    assert _get_column(Profile, "missing") is None


# ═════════════════════════════════════════════════════════════════════
# PAGINATION TESTS
# ═════════════════════════════════════════════════════════════════════


async def test_paginate_pages(db, people):
    query = select(Profile).order_by(Profile.id)
    rows, meta = await paginate(db, query, PaginationParams(page=2, page_size=3))
    assert [p.id for p in rows] == ["F300"]
    assert meta.total == 4
    assert meta.total_pages == 2
    assert meta.has_next is False
    assert meta.has_prev is True


async def test_paginate_empty(db):
    rows, meta = await paginate(db, select(Profile), PaginationParams(page=1, page_size=10))
    assert rows == []
    assert meta.total == 0
    assert meta.total_pages == 0
    assert meta.has_next is False


# ═════════════════════════════════════════════════════════════════════
# STORE RETRY TESTS
# ═════════════════════════════════════════════════════════════════════


def _operational() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("connection reset"))


def _integrity() -> IntegrityError:
    return IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))


class _FlakyStore:
    """Fails with *errors* in order, then returns "ok"."""

    def __init__(self, errors):
        self.savepoint = AsyncMock()
        self.savepoint.is_active = True
        self.db = AsyncMock()
        self.db.begin_nested.return_value = self.savepoint
        self.errors = list(errors)
        self.calls = 0

    @store_read("flaky read")
    async def read(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"

    @store_write("flaky write")
    async def write(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


@pytest.fixture
def fast_retries(monkeypatch):
    monkeypatch.setattr(settings, "STORE_RETRY_ATTEMPTS", 3)
    monkeypatch.setattr(settings, "STORE_RETRY_BASE_DELAY_SECONDS", 0)
    monkeypatch.setattr(settings, "STORE_RETRY_MAX_DELAY_SECONDS", 0)


def test_transient_classification():
    assert is_transient_error(_operational())
    assert is_transient_error(ConnectionError())
    assert not is_transient_error(_integrity())
    assert not is_transient_error(ValueError())


async def test_read_recovers_after_transient_failure(fast_retries, caplog):
    store = _FlakyStore([_operational()])
    assert await store.read() == "ok"
    assert store.calls == 2
    store.savepoint.rollback.assert_awaited_once()
    store.db.rollback.assert_not_awaited()
    assert "Retry attempt 1 for flaky read" in caplog.text


async def test_read_exhaustion_becomes_store_error(fast_retries):
    store = _FlakyStore([_operational()] * 3)
    with pytest.raises(StoreError) as exc_info:
        await store.read()
    assert store.calls == 3
    assert exc_info.value.status_code == 503
    assert exc_info.value.operation == "flaky read"


async def test_read_does_not_retry_integrity_errors(fast_retries):
    store = _FlakyStore([_integrity()])
    with pytest.raises(StoreError):
        await store.read()
    assert store.calls == 1
    store.savepoint.rollback.assert_awaited_once()
    store.db.rollback.assert_not_awaited()


async def test_write_runs_once(fast_retries):
    store = _FlakyStore([_operational()])
    with pytest.raises(StoreError):
        await store.write()
    assert store.calls == 1


async def test_write_passes_integrity_error_through(fast_retries):
    store = _FlakyStore([_integrity()])
    with pytest.raises(IntegrityError):
        await store.write()


async def test_read_retry_keeps_flushed_view_switch(client, db, fast_retries):
    await add_profile(db, id="E100")
    headers = await employee_session(client, "E100")

    real_get = AsyncSession.get
    failed: list[str] = []

    async def flaky_get(self, entity, ident, **kwargs):
        if entity is Profile and not failed:
            failed.append(ident)
            raise _operational()
        return await real_get(self, entity, ident, **kwargs)

    with patch.object(AsyncSession, "get", flaky_get):
        resp = await client.put(f"{API}/session/view", json={"view": "hr"}, headers=headers)

    assert resp.status_code == 200, resp.text
    assert failed == ["E100"]
    assert resp.json()["active_view"] == "hr"
    assert resp.json()["employee"]["id"] == "E100"
    state = (await client.get(f"{API}/session", headers=headers)).json()
    assert state["active_view"] == "hr"
