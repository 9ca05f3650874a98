"""Gatehouse repository - MongoDB CRUD for gatehouses."""

from __future__ import annotations

import logging

from workshopinfra.infra.db.counters import next_id
from workshopinfra.models.gatehouse import Gatehouse

logger = logging.getLogger(__name__)


class GatehouseRepo:
    """CRUD operations for gatehouses in MongoDB."""

    COLLECTION = "gatehouses"
    PREFIX = "GATE"

    def __init__(self, db) -> None:
        self._db = db
        self._col = db[self.COLLECTION]

    async def next_id(self) -> str:
        return await next_id(self._db, self.PREFIX)

    async def insert(self, gatehouse: Gatehouse) -> Gatehouse:
        await self._col.insert_one(gatehouse.to_doc())
        return gatehouse

    async def find_by_id(self, gatehouse_id: str) -> Gatehouse | None:
        doc = await self._col.find_one({"_id": gatehouse_id})
        return Gatehouse.from_doc(doc) if doc else None

    async def find_by_workshop(self, workshop_id: str) -> Gatehouse | None:
        doc = await self._col.find_one({"workshop_id": workshop_id})
        return Gatehouse.from_doc(doc) if doc else None
