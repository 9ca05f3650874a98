"""Tests for the Motor client wrapper with the driver mocked out."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from workshopinfra.config import MongoConfig
from workshopinfra.errors import CatalogUnavailableError
from workshopinfra.infra.db.client import SERVER_SELECTION_TIMEOUT_MS, MongoClient


@pytest.fixture
def motor_client():
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    with patch(
        "workshopinfra.infra.db.client.motor.motor_asyncio.AsyncIOMotorClient",
        return_value=client,
    ) as factory:
        yield factory, client


class TestMongoClient:
    def test_uses_configured_database(self, motor_client):
        factory, client = motor_client
        mongo = MongoClient(MongoConfig(uri="mongodb://db:27017", database="orc_test"))
        factory.assert_called_once_with(
            "mongodb://db:27017", serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
        )
        client.__getitem__.assert_called_once_with("orc_test")
        assert mongo.db is client.__getitem__.return_value

    @pytest.mark.asyncio
    async def test_reachable(self, motor_client):
        _, client = motor_client
        mongo = MongoClient(MongoConfig())
        assert await mongo.ping() is True
        await mongo.ensure_reachable()
        client.admin.command.assert_awaited_with("ping")

    @pytest.mark.asyncio
    async def test_unreachable_raises(self, motor_client):
        _, client = motor_client
        client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
        mongo = MongoClient(MongoConfig(uri="mongodb://down:27017"))
        assert await mongo.ping() is False
        with pytest.raises(CatalogUnavailableError, match="mongodb://down:27017"):
            await mongo.ensure_reachable()
