"""Factory repository - MongoDB CRUD for factories."""

from __future__ import annotations

import logging

from workshopinfra.infra.db.counters import next_id
from workshopinfra.models.workshop import Factory

logger = logging.getLogger(__name__)


class FactoryRepo:
    """CRUD operations for factories in MongoDB."""

    COLLECTION = "factories"
    PREFIX = "FACT"

    def __init__(self, db) -> None:
        self._db = db
        self._col = db[self.COLLECTION]

    async def next_id(self) -> str:
        return await next_id(self._db, self.PREFIX)

    async def insert(self, factory: Factory) -> Factory:
        await self._col.insert_one(factory.to_doc())
        return factory

    async def find_by_id(self, factory_id: str) -> Factory | None:
        doc = await self._col.find_one({"_id": factory_id})
        return Factory.from_doc(doc) if doc else None

    async def list_all(self) -> list[Factory]:
        cursor = self._col.find().sort("_id", 1)
        return [Factory.from_doc(doc) async for doc in cursor]
