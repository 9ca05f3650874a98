"""CLI handlers for infrastructure plan/apply/cleanup."""

from __future__ import annotations

import json

import click
from rich.console import Console

from workshopinfra.commands._helpers import get_context, run
from workshopinfra.commands.render import (
    render_apply_result,
    render_cleanup_result,
    render_effects,
    render_plan,
)
from workshopinfra.infra.fs import workshop_lock
from workshopinfra.services.effect_executor import RecordingEffectExecutor

ORPHANS_LOCK_KEY = "orphans"

console = Console()


@click.group("infra")
def infra_group():
    """Plan and apply workshop infrastructure."""
    pass


@infra_group.command("plan")
@click.argument("workshop_id")
@click.option("--json", "as_json", is_flag=True, help="Print the plan as JSON")
def infra_plan(workshop_id: str, as_json: bool):
    """Show what apply would create, delete or leave alone."""

    async def _plan():
        ctx = await get_context()
        try:
            plan = await ctx.infra_service().plan_infra(workshop_id)
            if as_json:
                click.echo(json.dumps(plan.to_dict(), indent=2))
            else:
                render_plan(plan, console)
        finally:
            await ctx.close()

    run(_plan())


@infra_group.command("apply")
@click.argument("workshop_id")
@click.option("--yes", "-y", is_flag=True, help="Skip the deletion confirmation")
@click.option("--force", is_flag=True, help="Delete orphans even with uncommitted changes")
@click.option("--no-delete", is_flag=True, help="Only create; never delete")
@click.option("--dry-run", is_flag=True, help="Print the effects instead of applying them")
def infra_apply(workshop_id: str, yes: bool, force: bool, no_delete: bool, dry_run: bool):
    """Create missing infrastructure and remove orphans."""

    async def _apply():
        ctx = await get_context()
        try:
            recorder = RecordingEffectExecutor() if dry_run else None
            service = ctx.infra_service(executor=recorder)
            with workshop_lock(ctx.config.paths.resolved_lock_dir, workshop_id):
                plan = await service.plan_infra(workshop_id, force=force, no_delete=no_delete)
                render_plan(plan, console)
                if not plan.has_work():
                    console.print("Nothing to do. All infrastructure exists.")
                    return

                if plan.has_deletes and not no_delete and not yes and not dry_run:
                    if not click.confirm("Apply these changes, including deletions?"):
                        click.echo("Aborted.")
                        return

                result = await service.apply_infra(plan)
            if recorder is not None:
                render_effects(recorder.effects, console)
            else:
                render_apply_result(result, console)
        finally:
            await ctx.close()

    run(_apply())


@infra_group.command("cleanup")
@click.option("--force", is_flag=True, help="Delete even with uncommitted changes")
def infra_cleanup(force: bool):
    """Delete every orphaned workbench and gatehouse on disk."""

    async def _cleanup():
        ctx = await get_context()
        try:
            with workshop_lock(ctx.config.paths.resolved_lock_dir, ORPHANS_LOCK_KEY):
                result = await ctx.infra_service().cleanup_orphans(force=force)
            render_cleanup_result(result, console)
        finally:
            await ctx.close()

    run(_cleanup())


@infra_group.command("cleanup-workbench")
@click.argument("workbench_id")
@click.option("--force", is_flag=True, help="Delete even with uncommitted changes")
def infra_cleanup_workbench(workbench_id: str, force: bool):
    """Remove a workbench's tree and tmux window."""

    async def _cleanup():
        ctx = await get_context()
        try:
            path = await ctx.infra_service().cleanup_workbench(workbench_id, force=force)
            click.echo(f"Removed {workbench_id}: {path}")
        finally:
            await ctx.close()

    run(_cleanup())


@infra_group.command("cleanup-workshop")
@click.argument("workshop_id")
@click.option("--force", is_flag=True, help="Delete even with uncommitted changes")
@click.confirmation_option(prompt="Remove all infrastructure for this workshop?")
def infra_cleanup_workshop(workshop_id: str, force: bool):
    """Remove every workbench tree, the gatehouse and the tmux session."""

    async def _cleanup():
        ctx = await get_context()
        try:
            with workshop_lock(ctx.config.paths.resolved_lock_dir, workshop_id):
                result = await ctx.infra_service().cleanup_workshop(workshop_id, force=force)
            render_cleanup_result(result, console)
        finally:
            await ctx.close()

    run(_cleanup())
