"""Plan generation: a pure function from observed state to classified ops.

All I/O happens before ``generate_plan`` is called; the snapshot carries every
fact the classification needs, so the same snapshot always yields the same
plan.
"""

from __future__ import annotations

from workshopinfra.models.plan import (
    GatehouseOp,
    InfraPlan,
    OpStatus,
    PaneInput,
    PaneOp,
    PlanSnapshot,
    TmuxObservation,
    TmuxSessionOp,
    WindowInput,
    WindowOp,
    WorkbenchInput,
    WorkbenchOp,
)


def _config_status(exists: bool) -> OpStatus:
    return OpStatus.EXISTS if exists else OpStatus.CREATE


def _gatehouse_op(snapshot: PlanSnapshot) -> GatehouseOp:
    if snapshot.gatehouse_exists:
        status = OpStatus.EXISTS
    elif snapshot.gatehouse_id:
        status = OpStatus.MISSING
    else:
        status = OpStatus.CREATE
    return GatehouseOp(
        id=snapshot.gatehouse_id,
        path=snapshot.gatehouse_path,
        status=status,
        config_status=_config_status(snapshot.gatehouse_config_exists),
    )


def _workbench_op(wb: WorkbenchInput) -> WorkbenchOp:
    if wb.exists:
        status = OpStatus.EXISTS
    elif wb.id:
        status = OpStatus.MISSING
    else:
        status = OpStatus.CREATE
    return WorkbenchOp(
        id=wb.id,
        name=wb.name,
        path=wb.path,
        status=status,
        config_status=_config_status(wb.config_exists),
        repo_name=wb.repo_name,
        branch=wb.home_branch,
    )


def _pane_op(pane: PaneInput) -> PaneOp:
    return PaneOp(
        index=pane.index,
        path_ok=pane.start_path == pane.expected_path,
        command_ok=not pane.expected_command or pane.start_command == pane.expected_command,
        expected_path=pane.expected_path,
        actual_path=pane.start_path,
        expected_command=pane.expected_command,
        actual_command=pane.start_command,
    )


def _window_op(window: WindowInput, existing: set[str]) -> WindowOp:
    exists = window.name in existing
    panes: tuple[PaneOp, ...] = ()
    if exists:
        panes = tuple(_pane_op(p) for p in window.panes)
    return WindowOp(
        name=window.name,
        path=window.path,
        status=OpStatus.EXISTS if exists else OpStatus.CREATE,
        agent_ok=window.expected_agent == window.actual_agent,
        expected_agent=window.expected_agent,
        actual_agent=window.actual_agent,
        panes=panes,
        is_goblin=window.is_goblin,
    )


def _tmux_session_op(tmux: TmuxObservation, archived: bool) -> TmuxSessionOp | None:
    if archived and not tmux.session_exists:
        # Nothing to tear down, and an archived workshop gets no new session
        return None

    existing = set(tmux.existing_windows) if tmux.session_exists else set()
    expected = () if archived else tmux.expected_windows
    expected_names = {w.name for w in expected}

    windows = tuple(_window_op(w, existing) for w in expected)
    orphans = tuple(
        WindowOp(name=name, path="", status=OpStatus.DELETE)
        for name in tmux.existing_windows
        if tmux.session_exists and name not in expected_names
    )
    return TmuxSessionOp(
        session_name=tmux.session_name,
        status=OpStatus.EXISTS if tmux.session_exists else OpStatus.CREATE,
        windows=windows,
        orphan_windows=orphans,
    )


def generate_plan(snapshot: PlanSnapshot) -> InfraPlan:
    """Classify every resource in ``snapshot`` as CREATE, DELETE, MISSING or EXISTS."""
    orphan_workbenches = tuple(
        WorkbenchOp(
            id=wb.id,
            name=wb.name,
            path=wb.path,
            status=OpStatus.DELETE,
            config_status=OpStatus.DELETE,
        )
        for wb in snapshot.orphan_workbenches
    )
    orphan_gatehouses = tuple(
        GatehouseOp(
            id=gh.place_id,
            path=gh.path,
            status=OpStatus.DELETE,
            config_status=OpStatus.DELETE,
        )
        for gh in snapshot.orphan_gatehouses
    )

    tmux_session = None
    if snapshot.tmux is not None:
        tmux_session = _tmux_session_op(snapshot.tmux, snapshot.workshop_archived)

    return InfraPlan(
        workshop_id=snapshot.workshop_id,
        workshop_name=snapshot.workshop_name,
        factory_id=snapshot.factory_id,
        factory_name=snapshot.factory_name,
        gatehouse=_gatehouse_op(snapshot),
        workbenches=tuple(_workbench_op(wb) for wb in snapshot.workbenches),
        orphan_workbenches=orphan_workbenches,
        orphan_gatehouses=orphan_gatehouses,
        tmux_session=tmux_session,
    )
