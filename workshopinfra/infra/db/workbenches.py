"""Workbench repository - MongoDB CRUD for workbenches."""

from __future__ import annotations

import logging

from workshopinfra.infra.db.counters import next_id
from workshopinfra.models.workbench import Workbench, WorkbenchStatus

logger = logging.getLogger(__name__)


class WorkbenchRepo:
    """CRUD operations for workbenches in MongoDB."""

    COLLECTION = "workbenches"
    PREFIX = "BENCH"

    def __init__(self, db) -> None:
        self._db = db
        self._col = db[self.COLLECTION]

    async def next_id(self) -> str:
        return await next_id(self._db, self.PREFIX)

    async def insert(self, workbench: Workbench) -> Workbench:
        await self._col.insert_one(workbench.to_doc())
        return workbench

    async def find_by_id(self, workbench_id: str) -> Workbench | None:
        doc = await self._col.find_one({"_id": workbench_id})
        return Workbench.from_doc(doc) if doc else None

    async def find_by_name(self, name: str) -> Workbench | None:
        doc = await self._col.find_one({"name": name})
        return Workbench.from_doc(doc) if doc else None

    async def list_by_workshop(self, workshop_id: str) -> list[Workbench]:
        """All workbenches of a workshop, archived included, in catalog order."""
        cursor = self._col.find({"workshop_id": workshop_id}).sort(
            [("created_at", 1), ("_id", 1)]
        )
        return [Workbench.from_doc(doc) async for doc in cursor]

    async def update_status(self, workbench_id: str, status: WorkbenchStatus) -> Workbench | None:
        result = await self._col.find_one_and_update(
            {"_id": workbench_id},
            {"$set": {"status": status.value}},
            return_document=True,
        )
        return Workbench.from_doc(result) if result else None
