"""Gatehouse catalog model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

GATEHOUSE_PREFIX = "GATE-"


@dataclass(frozen=True)
class Gatehouse:
    """Per-workshop control-plane record. At most one per workshop."""

    id: str
    workshop_id: str
    status: str = "active"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def agent_tag(self) -> str:
        return goblin_agent_tag(self.id)

    def to_doc(self) -> dict:
        return {
            "_id": self.id,
            "workshop_id": self.workshop_id,
            "status": self.status,
            "created_at": self.created_at,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> Gatehouse:
        return cls(
            id=str(doc["_id"]),
            workshop_id=doc["workshop_id"],
            status=doc.get("status", "active"),
            created_at=doc.get("created_at", datetime.now(timezone.utc)),
        )


def goblin_window_name(gatehouse_id: str) -> str:
    """Bootstrap window name: ``GATE-007`` -> ``goblin-007``."""
    return "goblin-" + gatehouse_id.removeprefix(GATEHOUSE_PREFIX)


def goblin_agent_tag(gatehouse_id: str) -> str:
    return f"GOBLIN@{gatehouse_id}"
