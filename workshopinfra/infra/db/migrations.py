"""MongoDB index creation."""

from __future__ import annotations

import logging

import pymongo

logger = logging.getLogger(__name__)


async def run_migrations(db) -> None:
    """Create catalog indexes on startup."""
    logger.info("Running MongoDB migrations...")

    workshops = db["workshops"]
    await workshops.create_index([("factory_id", pymongo.ASCENDING)])
    await workshops.create_index([("status", pymongo.ASCENDING)])

    workbenches = db["workbenches"]
    await workbenches.create_index(
        [("workshop_id", pymongo.ASCENDING), ("created_at", pymongo.ASCENDING)]
    )
    await workbenches.create_index([("name", pymongo.ASCENDING)], unique=True)

    # One gatehouse per workshop
    gatehouses = db["gatehouses"]
    await gatehouses.create_index([("workshop_id", pymongo.ASCENDING)], unique=True)

    repos = db["repos"]
    await repos.create_index([("name", pymongo.ASCENDING)], unique=True)
