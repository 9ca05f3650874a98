"""Motor connection to the catalog database."""

from __future__ import annotations

import logging

import motor.motor_asyncio
from pymongo.errors import PyMongoError

from workshopinfra.config import MongoConfig
from workshopinfra.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)

# Fail fast when the catalog is down instead of pymongo's 30s default
SERVER_SELECTION_TIMEOUT_MS = 5000


class MongoClient:
    """Owns the Motor client and the catalog database handle."""

    def __init__(self, config: MongoConfig) -> None:
        self._uri = config.uri
        self._client = motor.motor_asyncio.AsyncIOMotorClient(
            config.uri, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
        )
        self._db = self._client[config.database]
        logger.info("MongoDB client created: %s/%s", config.uri, config.database)

    @property
    def db(self) -> motor.motor_asyncio.AsyncIOMotorDatabase:
        return self._db

    def close(self) -> None:
        self._client.close()
        logger.info("MongoDB client closed")

    async def ping(self) -> bool:
        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            logger.warning("MongoDB ping failed: %s", e)
            return False
        return True

    async def ensure_reachable(self) -> None:
        """Raise CatalogUnavailableError unless the server answers a ping."""
        if not await self.ping():
            raise CatalogUnavailableError(self._uri)
