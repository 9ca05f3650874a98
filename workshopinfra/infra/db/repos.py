"""Source repository records - MongoDB CRUD."""

from __future__ import annotations

import logging

from workshopinfra.infra.db.counters import next_id
from workshopinfra.models.repo import Repo

logger = logging.getLogger(__name__)


class RepoRepo:
    """CRUD operations for source repositories in MongoDB."""

    COLLECTION = "repos"
    PREFIX = "REPO"

    def __init__(self, db) -> None:
        self._db = db
        self._col = db[self.COLLECTION]

    async def next_id(self) -> str:
        return await next_id(self._db, self.PREFIX)

    async def insert(self, repo: Repo) -> Repo:
        await self._col.insert_one(repo.to_doc())
        return repo

    async def find_by_id(self, repo_id: str) -> Repo | None:
        doc = await self._col.find_one({"_id": repo_id})
        return Repo.from_doc(doc) if doc else None

    async def find_by_name(self, name: str) -> Repo | None:
        doc = await self._col.find_one({"name": name})
        return Repo.from_doc(doc) if doc else None

    async def list_all(self) -> list[Repo]:
        cursor = self._col.find().sort("_id", 1)
        return [Repo.from_doc(doc) async for doc in cursor]
