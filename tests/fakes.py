"""In-memory stand-ins for the catalog repos, the working-tree adapter and tmux."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

from workshopinfra.config import AppConfig, PathsConfig
from workshopinfra.errors import TmuxError
from workshopinfra.infra.git import WorktreeStatus
from workshopinfra.infra.tmux import PLACEHOLDER_WINDOW, WORKSHOP_ENV_VAR
from workshopinfra.layout import InfraLayout
from workshopinfra.models.workshop import Factory, Workshop


class _FakeRepo:
    PREFIX = ""

    def __init__(self) -> None:
        self.records: dict = {}
        self._seq = 0

    async def next_id(self) -> str:
        self._seq += 1
        return f"{self.PREFIX}-{self._seq:03d}"

    async def insert(self, record):
        self.records[record.id] = record
        return record

    async def find_by_id(self, record_id: str):
        return self.records.get(record_id)

    async def list_all(self) -> list:
        return list(self.records.values())

    async def update_status(self, record_id: str, status):
        record = self.records.get(record_id)
        if record is None:
            return None
        record = replace(record, status=status)
        self.records[record_id] = record
        return record


class FakeFactoryRepo(_FakeRepo):
    PREFIX = "FACT"


class FakeWorkshopRepo(_FakeRepo):
    PREFIX = "WORK"

    async def list_all(self, factory_id: str = "") -> list:
        return [w for w in self.records.values() if not factory_id or w.factory_id == factory_id]


class FakeWorkbenchRepo(_FakeRepo):
    PREFIX = "BENCH"

    async def find_by_name(self, name: str):
        return next((wb for wb in self.records.values() if wb.name == name), None)

    async def list_by_workshop(self, workshop_id: str) -> list:
        return [wb for wb in self.records.values() if wb.workshop_id == workshop_id]


class FakeGatehouseRepo(_FakeRepo):
    PREFIX = "GATE"

    async def find_by_workshop(self, workshop_id: str):
        return next((g for g in self.records.values() if g.workshop_id == workshop_id), None)


class FakeRepoRepo(_FakeRepo):
    PREFIX = "REPO"

    async def find_by_name(self, name: str):
        return next((r for r in self.records.values() if r.name == name), None)


@dataclass
class FakeCatalog:
    factories: FakeFactoryRepo = field(default_factory=FakeFactoryRepo)
    workshops: FakeWorkshopRepo = field(default_factory=FakeWorkshopRepo)
    workbenches: FakeWorkbenchRepo = field(default_factory=FakeWorkbenchRepo)
    gatehouses: FakeGatehouseRepo = field(default_factory=FakeGatehouseRepo)
    repos: FakeRepoRepo = field(default_factory=FakeRepoRepo)

    def seed_workshop(self, name: str = "Alpha Team", archived: bool = False) -> Workshop:
        """Register factory FACT-001 and workshop WORK-001 synchronously."""
        from workshopinfra.models.workshop import WorkshopStatus

        factory = Factory(id="FACT-001", name="Main Factory")
        self.factories.records[factory.id] = factory
        workshop = Workshop(
            id="WORK-001",
            name=name,
            factory_id=factory.id,
            status=WorkshopStatus.ARCHIVED if archived else WorkshopStatus.ACTIVE,
        )
        self.workshops.records[workshop.id] = workshop
        self.factories._seq = max(self.factories._seq, 1)
        self.workshops._seq = max(self.workshops._seq, 1)
        return workshop


class FakeWorkspace:
    """Working-tree adapter reading existence from disk and status from a dict."""

    def __init__(self, statuses: dict[str, WorktreeStatus] | None = None) -> None:
        self.statuses = statuses or {}

    async def exists(self, path: str) -> bool:
        return Path(path).is_dir()

    async def status(self, path: str) -> WorktreeStatus:
        return self.statuses.get(path, WorktreeStatus())


class FakeTmux:
    """tmux server held in dicts: session -> {"env": {}, "windows": {name: {...}}}."""

    def __init__(
        self,
        editor_command: str = "vim",
        imp_command: str = "orc connect",
        goblin_command: str = "orc connect --role goblin",
    ) -> None:
        self.editor_command = editor_command
        self.imp_command = imp_command
        self.goblin_command = goblin_command
        self.sessions: dict[str, dict] = {}

    def add_session(self, name: str, workshop_id: str, windows: dict[str, str]) -> None:
        self.sessions[name] = {
            "env": {WORKSHOP_ENV_VAR: workshop_id},
            "windows": {
                w: {"path": path, "options": {}, "agent_command": self.imp_command}
                for w, path in windows.items()
            },
        }

    def windows(self, session: str) -> dict:
        return self.sessions[session]["windows"]

    def _window(self, session: str, window: str) -> dict:
        try:
            return self.sessions[session]["windows"][window]
        except KeyError:
            raise TmuxError(f"can't find window: {session}:{window}") from None

    # -- queries

    async def find_session_by_workshop_id(self, workshop_id: str) -> str:
        for name, session in self.sessions.items():
            if session["env"].get(WORKSHOP_ENV_VAR) == workshop_id:
                return name
        return ""

    async def list_windows(self, session: str) -> list[str]:
        if session not in self.sessions:
            return []
        return list(self.sessions[session]["windows"])

    async def get_window_option(self, target: str, option: str) -> str:
        session, _, window = target.partition(":")
        try:
            return self._window(session, window)["options"].get(option, "")
        except TmuxError:
            return ""

    async def get_pane_start_path(self, session: str, window: str, pane: int) -> str:
        return self._window(session, window)["path"]

    async def get_pane_start_command(self, session: str, window: str, pane: int) -> str:
        w = self._window(session, window)
        return {1: self.editor_command, 2: w["agent_command"]}.get(pane, "")

    # -- mutations

    async def create_session(self, name: str, working_dir: str) -> None:
        if name in self.sessions:
            raise TmuxError(f"duplicate session: {name}")
        self.sessions[name] = {
            "env": {},
            "windows": {
                PLACEHOLDER_WINDOW: {"path": working_dir, "options": {}, "agent_command": ""},
            },
        }

    async def set_environment(self, session: str, key: str, value: str) -> None:
        self.sessions[session]["env"][key] = value

    async def rename_window(self, session: str, window: str, new_name: str) -> None:
        windows = self.sessions[session]["windows"]
        self._window(session, window)
        self.sessions[session]["windows"] = {
            (new_name if name == window else name): w for name, w in windows.items()
        }

    async def create_workbench_window(
        self, session: str, index: int, name: str, working_dir: str
    ) -> None:
        self.sessions[session]["windows"][name] = {
            "path": working_dir, "options": {}, "agent_command": self.imp_command,
        }

    async def create_goblin_window(
        self, session: str, index: int, name: str, working_dir: str
    ) -> None:
        self.sessions[session]["windows"][name] = {
            "path": working_dir, "options": {}, "agent_command": self.goblin_command,
        }

    async def setup_goblin_pane(self, session: str, window: str, working_dir: str) -> None:
        w = self._window(session, window)
        w["path"] = working_dir
        w["agent_command"] = self.goblin_command

    async def set_window_option(self, target: str, option: str, value: str) -> None:
        session, _, window = target.partition(":")
        self._window(session, window)["options"][option] = value

    async def kill_window(self, session: str, window: str) -> None:
        self._window(session, window)
        del self.sessions[session]["windows"][window]

    async def kill_session(self, session: str) -> None:
        if session not in self.sessions:
            raise TmuxError(f"can't find session: {session}")
        del self.sessions[session]


def make_config(tmp_path: Path, **safety) -> AppConfig:
    config = AppConfig(
        branch_owner="tester",
        paths=PathsConfig(
            workbench_root=str(tmp_path / "wb"),
            gatehouse_root=str(tmp_path / "ws"),
            lock_dir=str(tmp_path / "locks"),
        ),
    )
    for key, value in safety.items():
        setattr(config.safety, key, value)
    return config


def make_layout(tmp_path: Path) -> InfraLayout:
    return InfraLayout(workbench_root=tmp_path / "wb", gatehouse_root=tmp_path / "ws")
