"""Workshop repository - MongoDB CRUD for workshops."""

from __future__ import annotations

import logging

from workshopinfra.infra.db.counters import next_id
from workshopinfra.models.workshop import Workshop, WorkshopStatus

logger = logging.getLogger(__name__)


class WorkshopRepo:
    """CRUD operations for workshops in MongoDB."""

    COLLECTION = "workshops"
    PREFIX = "WORK"

    def __init__(self, db) -> None:
        self._db = db
        self._col = db[self.COLLECTION]

    async def next_id(self) -> str:
        return await next_id(self._db, self.PREFIX)

    async def insert(self, workshop: Workshop) -> Workshop:
        await self._col.insert_one(workshop.to_doc())
        return workshop

    async def find_by_id(self, workshop_id: str) -> Workshop | None:
        doc = await self._col.find_one({"_id": workshop_id})
        return Workshop.from_doc(doc) if doc else None

    async def list_all(self, factory_id: str = "") -> list[Workshop]:
        query: dict = {}
        if factory_id:
            query["factory_id"] = factory_id
        cursor = self._col.find(query).sort("_id", 1)
        return [Workshop.from_doc(doc) async for doc in cursor]

    async def update_status(self, workshop_id: str, status: WorkshopStatus) -> Workshop | None:
        result = await self._col.find_one_and_update(
            {"_id": workshop_id},
            {"$set": {"status": status.value}},
            return_document=True,
        )
        return Workshop.from_doc(result) if result else None
