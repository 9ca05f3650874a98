"""Factory and workshop catalog models."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class WorkshopStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


def slugify(name: str) -> str:
    """Lowercase a name, map spaces/underscores to dashes, drop everything else."""
    slug = re.sub(r"[\s_]", "-", name.lower())
    return re.sub(r"[^a-z0-9-]", "", slug)


@dataclass(frozen=True)
class Factory:
    """Top-level grouping that owns workshops."""

    id: str
    name: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_doc(self) -> dict:
        return {"_id": self.id, "name": self.name, "created_at": self.created_at}

    @classmethod
    def from_doc(cls, doc: dict) -> Factory:
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            created_at=doc.get("created_at", datetime.now(timezone.utc)),
        )


@dataclass(frozen=True)
class Workshop:
    """A named set of workbenches under one factory."""

    id: str
    name: str
    factory_id: str
    status: WorkshopStatus = WorkshopStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Workshop name cannot be empty")

    @property
    def is_archived(self) -> bool:
        return self.status == WorkshopStatus.ARCHIVED

    @property
    def slug(self) -> str:
        return slugify(self.name)

    def to_doc(self) -> dict:
        """Serialize to MongoDB document."""
        return {
            "_id": self.id,
            "name": self.name,
            "factory_id": self.factory_id,
            "status": self.status.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> Workshop:
        """Deserialize from MongoDB document."""
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            factory_id=doc.get("factory_id", ""),
            status=WorkshopStatus(doc.get("status", WorkshopStatus.ACTIVE.value)),
            created_at=doc.get("created_at", datetime.now(timezone.utc)),
        )
