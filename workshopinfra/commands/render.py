"""Terminal rendering of plans and apply results."""

from __future__ import annotations

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from workshopinfra.models.effects import Effect, describe
from workshopinfra.models.plan import ApplyResult, CleanupResult, InfraPlan, OpStatus, PaneOp

STATUS_STYLES = {
    OpStatus.EXISTS: "blue",
    OpStatus.CREATE: "green",
    OpStatus.MISSING: "red",
    OpStatus.DELETE: "red",
}

PANE_NAMES = {1: "vim", 2: "agent", 3: "shell"}


def status_text(status: OpStatus) -> Text:
    return Text(status.value, style=STATUS_STYLES[status])


def _line(status: OpStatus, label: str) -> Text:
    return Text.assemble(status_text(status), " ", label)


def _pane_tree(parent: Tree, panes: tuple[PaneOp, ...]) -> None:
    for pane in panes:
        icon = Text("OK", style="green") if pane.ok else Text("MISMATCH", style="yellow")
        node = parent.add(Text.assemble(
            icon, f" pane {pane.index} ({PANE_NAMES.get(pane.index, '?')})",
        ))
        if pane.path_ok:
            node.add(Text.assemble("path: ", Text("OK", style="green")))
        else:
            node.add(Text.assemble(
                "path: ", Text("MISMATCH", style="yellow"),
                f"\n  expected: {pane.expected_path}\n  actual:   {pane.actual_path}",
            ))
        if pane.expected_command:
            if pane.command_ok:
                node.add(Text.assemble(
                    "cmd:  ", Text("OK", style="green"), f" ({pane.expected_command})",
                ))
            else:
                node.add(Text.assemble(
                    "cmd:  ", Text("MISMATCH", style="yellow"),
                    f"\n  expected: {pane.expected_command}\n  actual:   {pane.actual_command}",
                ))


def render_plan(plan: InfraPlan, console: Console) -> None:
    console.print(Text(f"Infrastructure Plan: {plan.workshop_id}", style="bold"))
    console.print()

    workshop = Tree("Workshop")
    workshop.add(f"ID: {plan.workshop_id}")
    workshop.add(f"Name: {plan.workshop_name}")
    workshop.add(f"Factory: {plan.factory_id} ({plan.factory_name})")
    console.print(workshop)

    gh = plan.gatehouse
    gatehouse = Tree("Gatehouse")
    gatehouse.add(_line(gh.status, f"directory: {gh.path}"))
    gatehouse.add(_line(gh.config_status, f"config: {gh.path}/.orc/config.json"))
    if gh.id:
        gatehouse.add(f"DB record: {gh.id}")
    else:
        gatehouse.add(Text.assemble("DB record: ", Text("(not created)", style="yellow")))
    console.print(gatehouse)

    workbenches = Tree("Workbenches")
    if not plan.workbenches:
        workbenches.add("(none)")
    for wb in plan.workbenches:
        label = f"{wb.id} ({wb.name}): {wb.path}"
        if wb.repo_name:
            label += f" [{wb.repo_name} @ {wb.branch}]"
        node = workbenches.add(_line(wb.status, label))
        node.add(_line(wb.config_status, "config: .orc/config.json"))
    console.print(workbenches)

    if plan.orphan_workbenches or plan.orphan_gatehouses:
        orphans = Tree("Orphaned Resources (exist on disk, not in DB)")
        for og in plan.orphan_gatehouses:
            orphans.add(_line(og.status, f"gatehouse {og.id}: {og.path}"))
        for ow in plan.orphan_workbenches:
            orphans.add(_line(ow.status, f"workbench {ow.id} ({ow.name}): {ow.path}"))
        console.print(orphans)

    session = plan.tmux_session
    if session is not None:
        tmux = Tree(_line(session.status, f"tmux session: {session.session_name}"))
        for window in session.windows:
            node = tmux.add(_line(window.status, f"window {window.name}"))
            if not window.agent_ok and window.expected_agent:
                node.add(Text.assemble(
                    "agent: ", Text("MISMATCH", style="yellow"),
                    f" (expected {window.expected_agent}, actual {window.actual_agent or '-'})",
                ))
            _pane_tree(node, window.panes)
        for window in session.orphan_windows:
            tmux.add(_line(window.status, f"orphan window {window.name}"))
        console.print(tmux)

    if plan.no_delete and plan.has_deletes:
        console.print(Text("Deletions skipped (--no-delete)", style="yellow"))


def render_apply_result(result: ApplyResult, console: Console) -> None:
    if result.nothing_to_do:
        console.print("Nothing to do. All infrastructure exists.")
        return
    console.print(Text("Infrastructure applied:", style="green"))
    if result.gatehouse_created:
        console.print("  - Gatehouse directory created")
    if result.workbenches_created:
        console.print(f"  - {result.workbenches_created} workbench worktree(s) created")
    if result.configs_created:
        console.print(f"  - {result.configs_created} config file(s) created")
    if result.orphans_deleted:
        console.print(f"  - {result.orphans_deleted} orphan(s) deleted")
    if result.windows_created:
        console.print(f"  - {result.windows_created} tmux window(s) created")
    if result.windows_killed:
        console.print(f"  - {result.windows_killed} orphan tmux window(s) killed")


def render_cleanup_result(result: CleanupResult, console: Console) -> None:
    if not result.removed_paths:
        console.print("No orphans found")
        return
    console.print(Text("Cleanup complete", style="green"))
    if result.workbenches_deleted:
        console.print(f"  - {result.workbenches_deleted} workbench(es) deleted")
    if result.gatehouses_deleted:
        console.print(f"  - {result.gatehouses_deleted} gatehouse(s) deleted")


def render_effects(effects: list[Effect], console: Console) -> None:
    if not effects:
        console.print("No effects.")
        return
    console.print(Text("Would execute:", style="bold"))
    for effect in effects:
        console.print(f"  {describe(effect)}", markup=False, highlight=False)
