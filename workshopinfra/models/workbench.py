"""Workbench catalog model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class WorkbenchStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass(frozen=True)
class Workbench:
    """An isolated git working tree assigned to one agent."""

    id: str
    name: str
    workshop_id: str
    repo_id: str = ""  # empty means a plain directory, no checkout
    home_branch: str = ""
    status: WorkbenchStatus = WorkbenchStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Workbench name cannot be empty")
        if "/" in self.name:
            raise ValueError(f"Workbench name cannot contain '/': {self.name!r}")
        if self.name in (".", ".."):
            raise ValueError(f"Workbench name cannot be {self.name!r}")

    @property
    def is_archived(self) -> bool:
        return self.status == WorkbenchStatus.ARCHIVED

    @property
    def agent_tag(self) -> str:
        """Identity stored in the window's @orc_agent option."""
        return f"IMP-{self.name}@{self.id}"

    def to_doc(self) -> dict:
        return {
            "_id": self.id,
            "name": self.name,
            "workshop_id": self.workshop_id,
            "repo_id": self.repo_id,
            "home_branch": self.home_branch,
            "status": self.status.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> Workbench:
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            workshop_id=doc["workshop_id"],
            repo_id=doc.get("repo_id", "") or "",
            home_branch=doc.get("home_branch", ""),
            status=WorkbenchStatus(doc.get("status", WorkbenchStatus.ACTIVE.value)),
            created_at=doc.get("created_at", datetime.now(timezone.utc)),
        )
