"""Port protocols consumed by the infra service."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from workshopinfra.infra.git import WorktreeStatus
from workshopinfra.models.effects import Effect


@runtime_checkable
class WorkspaceInspector(Protocol):
    """Observes working trees on disk."""

    async def exists(self, path: str) -> bool:
        ...

    async def status(self, path: str) -> WorktreeStatus:
        """Uncommitted-change summary; never raises."""
        ...


@runtime_checkable
class TmuxPort(Protocol):
    """The slice of the tmux adapter the planner and cleanup paths read."""

    async def find_session_by_workshop_id(self, workshop_id: str) -> str:
        ...

    async def list_windows(self, session: str) -> list[str]:
        ...

    async def get_window_option(self, target: str, option: str) -> str:
        ...

    async def get_pane_start_path(self, session: str, window: str, pane: int) -> str:
        ...

    async def get_pane_start_command(self, session: str, window: str, pane: int) -> str:
        ...

    async def kill_window(self, session: str, window: str) -> None:
        ...

    async def kill_session(self, session: str) -> None:
        ...


@runtime_checkable
class EffectRunner(Protocol):
    """Applies effects in order, stopping at the first failure."""

    dry_run: bool

    async def execute(self, effects: Sequence[Effect]) -> None:
        ...
