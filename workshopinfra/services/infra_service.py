"""Infrastructure reconciliation: plan, apply and cleanup for a workshop."""

from __future__ import annotations

import logging
from pathlib import Path

from workshopinfra.config import AppConfig
from workshopinfra.errors import DirtyWorktreeError, EffectExecutionError, NotFoundError
from workshopinfra.infra.base import EffectRunner, TmuxPort, WorkspaceInspector
from workshopinfra.infra.db.factories import FactoryRepo
from workshopinfra.infra.db.gatehouses import GatehouseRepo
from workshopinfra.infra.db.repos import RepoRepo
from workshopinfra.infra.db.workbenches import WorkbenchRepo
from workshopinfra.infra.db.workshops import WorkshopRepo
from workshopinfra.infra.fs import dir_exists, file_exists
from workshopinfra.infra.git import GitWorkspace
from workshopinfra.infra.tmux import AGENT_OPTION, PLACEHOLDER_WINDOW, WORKSHOP_ENV_VAR
from workshopinfra.layout import InfraLayout
from workshopinfra.models.descriptor import PlaceDescriptor, control_dir, descriptor_path
from workshopinfra.models.effects import (
    Effect,
    GitWorktreeAdd,
    Mkdir,
    RemoveDir,
    TmuxCreateSession,
    TmuxCreateWindow,
    TmuxKillSession,
    TmuxKillWindow,
    TmuxRenameWindow,
    TmuxSetEnvironment,
    TmuxSetOption,
    TmuxSetupGoblinPane,
    WriteFile,
)
from workshopinfra.models.gatehouse import Gatehouse, goblin_agent_tag, goblin_window_name
from workshopinfra.models.plan import (
    ApplyResult,
    CleanupResult,
    InfraPlan,
    OpStatus,
    PaneInput,
    PlanSnapshot,
    TmuxObservation,
    TmuxSessionOp,
    WindowInput,
    WorkbenchInput,
)
from workshopinfra.models.workbench import Workbench
from workshopinfra.models.workshop import Workshop
from workshopinfra.services.effect_executor import EffectExecutor
from workshopinfra.services.orphan_scanner import OrphanScanner
from workshopinfra.services.planner import generate_plan

logger = logging.getLogger(__name__)

# Stand-in id shown by dry runs for a gatehouse record that apply would create
PENDING_GATEHOUSE_ID = "GATE-new"


def _descriptor_effects(place_dir: str, place_id: str) -> list[Effect]:
    path = Path(place_dir)
    return [
        Mkdir(str(control_dir(path))),
        WriteFile(str(descriptor_path(path)), PlaceDescriptor(place_id).to_json()),
    ]


class InfraService:
    """Plans and applies workshop infrastructure.

    Every step is awaited in order. The service holds no locks; callers that
    may race serialize through ``infra.fs.workshop_lock``.
    """

    def __init__(
        self,
        workshop_repo: WorkshopRepo,
        factory_repo: FactoryRepo,
        workbench_repo: WorkbenchRepo,
        gatehouse_repo: GatehouseRepo,
        repo_repo: RepoRepo,
        config: AppConfig,
        layout: InfraLayout | None = None,
        workspace: WorkspaceInspector | None = None,
        tmux: TmuxPort | None = None,
        executor: EffectRunner | None = None,
    ) -> None:
        self._workshops = workshop_repo
        self._factories = factory_repo
        self._workbenches = workbench_repo
        self._gatehouses = gatehouse_repo
        self._repos = repo_repo
        self._config = config
        self._layout = layout or InfraLayout.from_config(config)
        self._workspace = workspace or GitWorkspace()
        self._tmux = tmux
        self._executor = executor or EffectExecutor(tmux)
        self._scanner = OrphanScanner(self._layout, workbench_repo, gatehouse_repo)

    # -- plan ----------------------------------------------------------------

    async def plan_infra(
        self, workshop_id: str, force: bool = False, no_delete: bool = False
    ) -> InfraPlan:
        """Observe the workshop's infrastructure and diff it against the catalog."""
        snapshot = await self.collect_snapshot(workshop_id)
        plan = generate_plan(snapshot).with_flags(force=force, no_delete=no_delete)
        logger.info(
            "Planned %s: %d workbenches, %d orphan workbenches, %d orphan gatehouses",
            workshop_id, len(plan.workbenches),
            len(plan.orphan_workbenches), len(plan.orphan_gatehouses),
        )
        return plan

    async def collect_snapshot(self, workshop_id: str) -> PlanSnapshot:
        workshop = await self._workshops.find_by_id(workshop_id)
        if workshop is None:
            raise NotFoundError("workshop", workshop_id)
        factory = await self._factories.find_by_id(workshop.factory_id)
        if factory is None:
            raise NotFoundError("factory", workshop.factory_id)

        gatehouse = await self._gatehouses.find_by_workshop(workshop_id)
        gatehouse_id = gatehouse.id if gatehouse else ""
        gatehouse_path = self._layout.gatehouse_path(workshop_id, workshop.name)

        # Archived workbenches keep their records and are left alone
        workbenches = [
            wb for wb in await self._workbenches.list_by_workshop(workshop_id)
            if not wb.is_archived
        ]
        wb_inputs = []
        for wb in workbenches:
            wb_inputs.append(await self._workbench_input(wb))

        orphan_wbs, orphan_ghs = await self._scanner.scan(
            known_workbench_ids=[wb.id for wb in workbenches],
            known_gatehouse_id=gatehouse_id,
        )

        tmux = None
        if self._tmux is not None:
            tmux = await self._observe_tmux(
                workshop, gatehouse_id, str(gatehouse_path), workbenches,
            )

        return PlanSnapshot(
            workshop_id=workshop.id,
            workshop_name=workshop.name,
            factory_id=factory.id,
            factory_name=factory.name,
            workshop_archived=workshop.is_archived,
            gatehouse_id=gatehouse_id,
            gatehouse_path=str(gatehouse_path),
            gatehouse_exists=dir_exists(gatehouse_path),
            gatehouse_config_exists=file_exists(descriptor_path(gatehouse_path)),
            workbenches=tuple(wb_inputs),
            orphan_workbenches=tuple(orphan_wbs),
            orphan_gatehouses=tuple(orphan_ghs),
            tmux=tmux,
        )

    async def _workbench_input(self, wb: Workbench) -> WorkbenchInput:
        repo_name = ""
        if wb.repo_id:
            repo = await self._repos.find_by_id(wb.repo_id)
            if repo is not None:
                repo_name = repo.name
        path = self._layout.workbench_path(wb.name)
        return WorkbenchInput(
            id=wb.id,
            name=wb.name,
            path=str(path),
            repo_name=repo_name,
            home_branch=wb.home_branch or self._config.default_branch(wb.name),
            exists=await self._workspace.exists(str(path)),
            config_exists=file_exists(descriptor_path(path)),
        )

    async def _observe_tmux(
        self,
        workshop: Workshop,
        gatehouse_id: str,
        gatehouse_path: str,
        workbenches: list[Workbench],
    ) -> TmuxObservation:
        session = await self._tmux.find_session_by_workshop_id(workshop.id)
        existing = await self._tmux.list_windows(session) if session else []

        expected: list[WindowInput] = []
        if not workshop.is_archived:
            tmux_cfg = self._config.tmux
            expected.append(await self._window_input(
                session, existing,
                name=goblin_window_name(gatehouse_id),
                path=gatehouse_path,
                expected_agent=goblin_agent_tag(gatehouse_id),
                agent_command=tmux_cfg.goblin_command,
                is_goblin=True,
            ))
            for wb in workbenches:
                expected.append(await self._window_input(
                    session, existing,
                    name=wb.name,
                    path=str(self._layout.workbench_path(wb.name)),
                    expected_agent=wb.agent_tag,
                    agent_command=tmux_cfg.imp_command,
                ))

        return TmuxObservation(
            session_exists=bool(session),
            session_name=session or workshop.name,
            existing_windows=tuple(existing),
            expected_windows=tuple(expected),
        )

    async def _window_input(
        self,
        session: str,
        existing: list[str],
        name: str,
        path: str,
        expected_agent: str,
        agent_command: str,
        is_goblin: bool = False,
    ) -> WindowInput:
        if not session or name not in existing:
            return WindowInput(
                name=name, path=path, expected_agent=expected_agent, is_goblin=is_goblin,
            )
        actual_agent = await self._tmux.get_window_option(f"{session}:{name}", AGENT_OPTION)
        expected_commands = {1: self._config.tmux.editor_command, 2: agent_command, 3: ""}
        panes = []
        for index, command in expected_commands.items():
            panes.append(PaneInput(
                index=index,
                start_path=await self._tmux.get_pane_start_path(session, name, index),
                start_command=await self._tmux.get_pane_start_command(session, name, index),
                expected_path=path,
                expected_command=command,
            ))
        return WindowInput(
            name=name,
            path=path,
            expected_agent=expected_agent,
            actual_agent=actual_agent,
            panes=tuple(panes),
            is_goblin=is_goblin,
        )

    # -- apply ---------------------------------------------------------------

    async def apply_infra(self, plan: InfraPlan) -> ApplyResult:
        """Carry out a plan produced by ``plan_infra``.

        Raises EffectExecutionError when a filesystem or git step fails and
        DirtyWorktreeError when an orphan holds uncommitted work.
        """
        result = ApplyResult(workshop_id=plan.workshop_id, workshop_name=plan.workshop_name)
        if not plan.has_work():
            result.nothing_to_do = True
            return result

        gatehouse_id = plan.gatehouse.id or await self._ensure_gatehouse(plan.workshop_id)
        if plan.gatehouse.needs_action:
            await self._executor.execute(
                [Mkdir(plan.gatehouse.path), *_descriptor_effects(plan.gatehouse.path, gatehouse_id)]
            )
            result.gatehouse_created = True
            result.configs_created += 1
            logger.info("Gatehouse %s ready at %s", gatehouse_id, plan.gatehouse.path)

        await self._apply_workbenches(plan, result)

        if not plan.no_delete:
            await self._delete_orphans(plan, result)

        if self._tmux is not None and plan.tmux_session is not None:
            await self._apply_tmux(plan, plan.tmux_session, gatehouse_id, result)

        return result

    async def _ensure_gatehouse(self, workshop_id: str) -> str:
        existing = await self._gatehouses.find_by_workshop(workshop_id)
        if existing is not None:
            return existing.id
        if self._executor.dry_run:
            return PENDING_GATEHOUSE_ID
        gatehouse = Gatehouse(id=await self._gatehouses.next_id(), workshop_id=workshop_id)
        await self._gatehouses.insert(gatehouse)
        logger.info("Created gatehouse record %s for %s", gatehouse.id, workshop_id)
        return gatehouse.id

    async def _apply_workbenches(self, plan: InfraPlan, result: ApplyResult) -> None:
        planned = {op.id: op for op in plan.workbenches if op.id}
        for wb in await self._workbenches.list_by_workshop(plan.workshop_id):
            op = planned.get(wb.id)
            if op is None or not op.needs_action:
                continue

            effects: list[Effect] = []
            if op.status.needs_create:
                effects.append(await self._tree_effect(wb, op.path))
                result.workbenches_created += 1
            effects.extend(_descriptor_effects(op.path, wb.id))
            await self._executor.execute(effects)
            result.configs_created += 1
            logger.info("Workbench %s ready at %s", wb.id, op.path)

    async def _tree_effect(self, wb: Workbench, path: str) -> Effect:
        if not wb.repo_id:
            return Mkdir(path)
        repo = await self._repos.find_by_id(wb.repo_id)
        if repo is None:
            raise NotFoundError("repo", wb.repo_id)
        branch = wb.home_branch or self._config.default_branch(wb.name)
        return GitWorktreeAdd(repo_path=repo.local_path, branch=branch, target_path=path)

    async def _delete_orphans(self, plan: InfraPlan, result: ApplyResult) -> None:
        workbenches = [op for op in plan.orphan_workbenches if op.status == OpStatus.DELETE]
        if not plan.force:
            for op in workbenches:
                await self._check_dirty(op.id, op.path)
        for op in workbenches:
            await self._executor.execute([RemoveDir(op.path)])
            result.orphans_deleted += 1
            logger.info("Deleted orphan workbench %s at %s", op.id, op.path)

        gatehouses = [op for op in plan.orphan_gatehouses if op.status == OpStatus.DELETE]
        if not plan.force:
            for op in gatehouses:
                await self._check_dirty(op.id, op.path)
        for op in gatehouses:
            await self._executor.execute([RemoveDir(op.path)])
            result.orphans_deleted += 1
            logger.info("Deleted orphan gatehouse %s at %s", op.id, op.path)

    async def _apply_tmux(
        self,
        plan: InfraPlan,
        session_op: TmuxSessionOp,
        gatehouse_id: str,
        result: ApplyResult,
    ) -> None:
        session = session_op.session_name or plan.workshop_name
        new_session = session_op.status == OpStatus.CREATE
        if new_session:
            await self._executor.execute([
                TmuxCreateSession(session=session, working_dir=plan.gatehouse.path),
                TmuxSetEnvironment(session=session, key=WORKSHOP_ENV_VAR, value=plan.workshop_id),
            ])

        first = True
        for index, window in enumerate(session_op.windows, start=1):
            name = window.name
            expected_agent = window.expected_agent
            if window.is_goblin and gatehouse_id:
                # The gatehouse id may only have been allocated during this apply
                name = goblin_window_name(gatehouse_id)
                expected_agent = goblin_agent_tag(gatehouse_id)

            if window.status == OpStatus.CREATE:
                if first and new_session:
                    effects: list[Effect] = [TmuxRenameWindow(session, PLACEHOLDER_WINDOW, name)]
                    if window.is_goblin:
                        effects.append(TmuxSetupGoblinPane(session, name, window.path))
                else:
                    effects = [
                        TmuxCreateWindow(session, index, name, window.path, goblin=window.is_goblin)
                    ]
                await self._executor.execute(effects)
                result.windows_created += 1
            first = False

            if expected_agent != window.actual_agent and expected_agent:
                await self._best_effort(
                    TmuxSetOption(f"{session}:{name}", AGENT_OPTION, expected_agent)
                )

        if not plan.no_delete:
            for window in session_op.orphan_windows:
                if window.status != OpStatus.DELETE:
                    continue
                if await self._best_effort(TmuxKillWindow(session, window.name)):
                    result.windows_killed += 1

    async def _best_effort(self, effect: Effect) -> bool:
        try:
            await self._executor.execute([effect])
        except EffectExecutionError as e:
            logger.warning("Ignoring tmux failure: %s", e)
            return False
        return True

    async def _check_dirty(self, place_id: str, path: str) -> None:
        """Raise DirtyWorktreeError if deleting ``path`` could lose work."""
        if not await self._workspace.exists(path):
            return
        status = await self._workspace.status(path)
        if status.dirty:
            raise DirtyWorktreeError(place_id, status.modified, status.untracked)
        if not status.known and self._config.safety.unknown_dirty_blocks_delete:
            raise DirtyWorktreeError(place_id, known=False)

    # -- cleanup -------------------------------------------------------------

    async def cleanup_workbench(self, workbench_id: str, force: bool = False) -> str:
        """Remove a workbench's tree and its tmux window. Returns the removed path."""
        wb = await self._workbenches.find_by_id(workbench_id)
        if wb is None:
            raise NotFoundError("workbench", workbench_id)
        path = str(self._layout.workbench_path(wb.name))
        if not force:
            await self._check_dirty(wb.id, path)
        await self._executor.execute([RemoveDir(path)])
        logger.info("Removed workbench %s at %s", wb.id, path)

        if self._tmux is not None:
            session = await self._tmux.find_session_by_workshop_id(wb.workshop_id)
            if session:
                await self._best_effort(TmuxKillWindow(session, wb.name))
        return path

    async def cleanup_workshop(self, workshop_id: str, force: bool = False) -> CleanupResult:
        """Remove every workbench tree, the gatehouse and the tmux session of a workshop."""
        workshop = await self._workshops.find_by_id(workshop_id)
        if workshop is None:
            raise NotFoundError("workshop", workshop_id)

        result = CleanupResult()
        for wb in await self._workbenches.list_by_workshop(workshop_id):
            result.removed_paths.append(await self.cleanup_workbench(wb.id, force=force))
            result.workbenches_deleted += 1

        gatehouse_path = str(self._layout.gatehouse_path(workshop_id, workshop.name))
        await self._executor.execute([RemoveDir(gatehouse_path)])
        result.removed_paths.append(gatehouse_path)
        result.gatehouses_deleted += 1

        if self._tmux is not None:
            session = await self._tmux.find_session_by_workshop_id(workshop_id)
            if session:
                await self._best_effort(TmuxKillSession(session))
        logger.info("Cleaned up workshop %s", workshop_id)
        return result

    async def cleanup_orphans(self, force: bool = False) -> CleanupResult:
        """Delete every orphaned workbench and gatehouse on disk."""
        orphan_wbs, orphan_ghs = await self._scanner.scan()
        result = CleanupResult()
        for wb in orphan_wbs:
            if not force:
                await self._check_dirty(wb.id, wb.path)
            await self._executor.execute([RemoveDir(wb.path)])
            result.workbenches_deleted += 1
            result.removed_paths.append(wb.path)
        for gh in orphan_ghs:
            if not force:
                await self._check_dirty(gh.place_id, gh.path)
            await self._executor.execute([RemoveDir(gh.path)])
            result.gatehouses_deleted += 1
            result.removed_paths.append(gh.path)
        return result
