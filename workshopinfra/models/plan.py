"""Infrastructure plan model: observed-state snapshot in, classified ops out."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import Enum


class OpStatus(str, Enum):
    CREATE = "CREATE"
    DELETE = "DELETE"
    MISSING = "MISSING"  # cataloged but physically absent
    EXISTS = "EXISTS"  # no-op

    @property
    def needs_create(self) -> bool:
        return self in (OpStatus.CREATE, OpStatus.MISSING)


# -- snapshot (planner input) ------------------------------------------------


@dataclass(frozen=True)
class WorkbenchInput:
    id: str
    name: str
    path: str
    repo_name: str = ""
    home_branch: str = ""
    exists: bool = False
    config_exists: bool = False


@dataclass(frozen=True)
class GatehouseInput:
    place_id: str
    path: str


@dataclass(frozen=True)
class PaneInput:
    index: int
    start_path: str
    start_command: str
    expected_path: str
    expected_command: str = ""  # empty: any command is fine


@dataclass(frozen=True)
class WindowInput:
    name: str
    path: str
    expected_agent: str = ""
    actual_agent: str = ""
    panes: tuple[PaneInput, ...] = ()
    is_goblin: bool = False


@dataclass(frozen=True)
class TmuxObservation:
    session_exists: bool = False
    session_name: str = ""
    existing_windows: tuple[str, ...] = ()
    expected_windows: tuple[WindowInput, ...] = ()


@dataclass(frozen=True)
class PlanSnapshot:
    """Everything the planner needs, gathered up front by the caller."""

    workshop_id: str
    workshop_name: str
    factory_id: str
    factory_name: str
    workshop_archived: bool = False
    gatehouse_id: str = ""
    gatehouse_path: str = ""
    gatehouse_exists: bool = False
    gatehouse_config_exists: bool = False
    workbenches: tuple[WorkbenchInput, ...] = ()
    orphan_workbenches: tuple[WorkbenchInput, ...] = ()
    orphan_gatehouses: tuple[GatehouseInput, ...] = ()
    tmux: TmuxObservation | None = None


# -- plan (planner output) ---------------------------------------------------


@dataclass(frozen=True)
class GatehouseOp:
    id: str
    path: str
    status: OpStatus
    config_status: OpStatus

    @property
    def needs_action(self) -> bool:
        return self.status != OpStatus.EXISTS or self.config_status != OpStatus.EXISTS


@dataclass(frozen=True)
class WorkbenchOp:
    id: str
    name: str
    path: str
    status: OpStatus
    config_status: OpStatus
    repo_name: str = ""
    branch: str = ""

    @property
    def needs_action(self) -> bool:
        return self.status.needs_create or self.config_status == OpStatus.CREATE


@dataclass(frozen=True)
class PaneOp:
    index: int
    path_ok: bool
    command_ok: bool
    expected_path: str
    actual_path: str
    expected_command: str = ""
    actual_command: str = ""

    @property
    def ok(self) -> bool:
        return self.path_ok and self.command_ok


@dataclass(frozen=True)
class WindowOp:
    name: str
    path: str
    status: OpStatus
    agent_ok: bool = True
    expected_agent: str = ""
    actual_agent: str = ""
    panes: tuple[PaneOp, ...] = ()
    is_goblin: bool = False


@dataclass(frozen=True)
class TmuxSessionOp:
    session_name: str
    status: OpStatus
    windows: tuple[WindowOp, ...] = ()
    orphan_windows: tuple[WindowOp, ...] = ()


@dataclass(frozen=True)
class InfraPlan:
    workshop_id: str
    workshop_name: str
    factory_id: str
    factory_name: str
    gatehouse: GatehouseOp
    workbenches: tuple[WorkbenchOp, ...] = ()
    orphan_workbenches: tuple[WorkbenchOp, ...] = ()
    orphan_gatehouses: tuple[GatehouseOp, ...] = ()
    tmux_session: TmuxSessionOp | None = None
    force: bool = False
    no_delete: bool = False

    def with_flags(self, force: bool = False, no_delete: bool = False) -> InfraPlan:
        """Return a copy carrying the caller's apply flags."""
        return replace(self, force=force, no_delete=no_delete)

    @property
    def has_deletes(self) -> bool:
        if self.orphan_workbenches or self.orphan_gatehouses:
            return True
        return bool(self.tmux_session and self.tmux_session.orphan_windows)

    def has_work(self) -> bool:
        """True when any resource is CREATE/MISSING, or DELETE and deletes are allowed."""
        if self.gatehouse.needs_action:
            return True
        if any(wb.needs_action for wb in self.workbenches):
            return True
        if not self.no_delete and (self.orphan_workbenches or self.orphan_gatehouses):
            return True
        session = self.tmux_session
        if session is not None:
            if session.status == OpStatus.CREATE:
                return True
            if any(w.status == OpStatus.CREATE for w in session.windows):
                return True
            if not self.no_delete and session.orphan_windows:
                return True
        return False

    def to_dict(self) -> dict:
        """Plain JSON-ready dict, enum values flattened to strings."""
        return _flatten(asdict(self))


def _flatten(value):
    if isinstance(value, dict):
        return {k: _flatten(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_flatten(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value


# -- results -----------------------------------------------------------------


@dataclass
class ApplyResult:
    workshop_id: str
    workshop_name: str = ""
    gatehouse_created: bool = False
    workbenches_created: int = 0
    configs_created: int = 0
    orphans_deleted: int = 0
    windows_created: int = 0
    windows_killed: int = 0
    nothing_to_do: bool = False


@dataclass
class CleanupResult:
    workbenches_deleted: int = 0
    gatehouses_deleted: int = 0
    removed_paths: list[str] = field(default_factory=list)
