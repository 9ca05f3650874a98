"""Tests for the MongoDB repos against a mocked Motor database."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from workshopinfra.infra.db.counters import next_id
from workshopinfra.infra.db.gatehouses import GatehouseRepo
from workshopinfra.infra.db.workbenches import WorkbenchRepo
from workshopinfra.models.gatehouse import Gatehouse


def _db(collection):
    db = MagicMock()
    db.__getitem__.return_value = collection
    return db


class TestCounters:
    @pytest.mark.asyncio
    async def test_formats_sequence(self):
        col = MagicMock()
        col.find_one_and_update = AsyncMock(return_value={"_id": "BENCH", "seq": 7})
        assert await next_id(_db(col), "BENCH") == "BENCH-007"
        args, kwargs = col.find_one_and_update.call_args
        assert args[0] == {"_id": "BENCH"}
        assert args[1] == {"$inc": {"seq": 1}}
        assert kwargs["upsert"] is True

    @pytest.mark.asyncio
    async def test_wide_sequence(self):
        col = MagicMock()
        col.find_one_and_update = AsyncMock(return_value={"_id": "GATE", "seq": 1234})
        assert await next_id(_db(col), "GATE") == "GATE-1234"


class TestGatehouseRepo:
    @pytest.mark.asyncio
    async def test_find_by_workshop(self):
        col = MagicMock()
        col.find_one = AsyncMock(return_value={
            "_id": "GATE-001", "workshop_id": "WORK-001", "status": "active",
            "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        })
        repo = GatehouseRepo(_db(col))
        gatehouse = await repo.find_by_workshop("WORK-001")
        assert gatehouse.id == "GATE-001"
        col.find_one.assert_awaited_once_with({"workshop_id": "WORK-001"})

    @pytest.mark.asyncio
    async def test_missing_returns_none(self):
        col = MagicMock()
        col.find_one = AsyncMock(return_value=None)
        assert await GatehouseRepo(_db(col)).find_by_id("GATE-404") is None

    @pytest.mark.asyncio
    async def test_insert(self):
        col = MagicMock()
        col.insert_one = AsyncMock()
        gatehouse = Gatehouse(id="GATE-002", workshop_id="WORK-002")
        assert await GatehouseRepo(_db(col)).insert(gatehouse) is gatehouse
        doc = col.insert_one.call_args.args[0]
        assert doc["_id"] == "GATE-002"


class TestWorkbenchRepo:
    @pytest.mark.asyncio
    async def test_find_by_id(self):
        col = MagicMock()
        col.find_one = AsyncMock(return_value={
            "_id": "BENCH-003", "name": "api", "workshop_id": "WORK-001",
            "repo_id": None, "status": "archived",
        })
        wb = await WorkbenchRepo(_db(col)).find_by_id("BENCH-003")
        assert wb.name == "api"
        assert wb.repo_id == ""
        assert wb.is_archived
