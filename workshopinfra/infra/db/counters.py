"""Sequential ``PREFIX-NNN`` identifiers backed by a counters collection."""

from __future__ import annotations

from pymongo import ReturnDocument

COLLECTION = "counters"


async def next_id(db, prefix: str) -> str:
    """Atomically allocate the next identifier for ``prefix``."""
    doc = await db[COLLECTION].find_one_and_update(
        {"_id": prefix},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return f"{prefix}-{doc['seq']:03d}"
