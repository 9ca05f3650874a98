"""Source repository catalog model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class Repo:
    """A local git repository that workbench trees are checked out from."""

    id: str
    name: str
    local_path: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_doc(self) -> dict:
        return {
            "_id": self.id,
            "name": self.name,
            "local_path": self.local_path,
            "created_at": self.created_at,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> Repo:
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            local_path=doc["local_path"],
            created_at=doc.get("created_at", datetime.now(timezone.utc)),
        )
