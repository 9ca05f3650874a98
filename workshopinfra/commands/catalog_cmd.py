"""CLI handlers for catalog records: factories, workshops, workbenches, repos."""

from __future__ import annotations

import click

from workshopinfra.commands._helpers import get_context, run


@click.group("factory")
def factory_group():
    """Manage factories."""
    pass


@factory_group.command("create")
@click.argument("name")
def factory_create(name: str):
    """Create a factory."""

    async def _create():
        ctx = await get_context()
        try:
            factory = await ctx.catalog_service.create_factory(name)
            click.echo(f"Created factory: {factory.id} ({factory.name})")
        finally:
            await ctx.close()

    run(_create())


@factory_group.command("list")
def factory_list():
    """List factories."""

    async def _list():
        ctx = await get_context()
        try:
            factories = await ctx.catalog_service.list_factories()
            if not factories:
                click.echo("No factories found.")
                return
            for f in factories:
                click.echo(f"  {f.id} - {f.name}")
        finally:
            await ctx.close()

    run(_list())


@click.group("workshop")
def workshop_group():
    """Manage workshops."""
    pass


@workshop_group.command("create")
@click.argument("name")
@click.option("--factory", "-f", "factory_id", required=True, help="Owning factory ID")
def workshop_create(name: str, factory_id: str):
    """Create a workshop."""

    async def _create():
        ctx = await get_context()
        try:
            workshop = await ctx.catalog_service.create_workshop(name, factory_id)
            click.echo(f"Created workshop: {workshop.id} ({workshop.name})")
            click.echo(f"  Gatehouse path: {ctx.layout.gatehouse_path(workshop.id, workshop.name)}")
        finally:
            await ctx.close()

    run(_create())


@workshop_group.command("list")
@click.option("--factory", "-f", "factory_id", default="", help="Filter by factory ID")
def workshop_list(factory_id: str):
    """List workshops."""

    async def _list():
        ctx = await get_context()
        try:
            workshops = await ctx.catalog_service.list_workshops(factory_id)
            if not workshops:
                click.echo("No workshops found.")
                return
            for w in workshops:
                click.echo(f"  {w.id} ({w.status.value}) - {w.name} [{w.factory_id}]")
        finally:
            await ctx.close()

    run(_list())


@workshop_group.command("archive")
@click.argument("workshop_id")
def workshop_archive(workshop_id: str):
    """Archive a workshop. The next apply tears down its tmux windows."""

    async def _archive():
        ctx = await get_context()
        try:
            workshop = await ctx.catalog_service.archive_workshop(workshop_id)
            click.echo(f"Archived: {workshop.id}")
        finally:
            await ctx.close()

    run(_archive())


@click.group("workbench")
def workbench_group():
    """Manage workbenches."""
    pass


@workbench_group.command("create")
@click.argument("name")
@click.option("--workshop", "-w", "workshop_id", required=True, help="Owning workshop ID")
@click.option("--repo", "-r", "repo_id", default="", help="Repo ID to check out from")
@click.option("--branch", "-b", default="", help="Home branch (defaults to <owner>/<name>)")
def workbench_create(name: str, workshop_id: str, repo_id: str, branch: str):
    """Register a workbench. Run 'infra apply' to create its tree."""

    async def _create():
        ctx = await get_context()
        try:
            wb = await ctx.catalog_service.create_workbench(
                name=name, workshop_id=workshop_id, repo_id=repo_id, home_branch=branch,
            )
            click.echo(f"Created workbench: {wb.id} ({wb.name})")
            click.echo(f"  Path: {ctx.layout.workbench_path(wb.name)}")
        finally:
            await ctx.close()

    run(_create())


@workbench_group.command("list")
@click.argument("workshop_id")
def workbench_list(workshop_id: str):
    """List the workbenches of a workshop."""

    async def _list():
        ctx = await get_context()
        try:
            workbenches = await ctx.catalog_service.list_workbenches(workshop_id)
            if not workbenches:
                click.echo("No workbenches found.")
                return
            for wb in workbenches:
                repo = f" repo={wb.repo_id}" if wb.repo_id else ""
                click.echo(f"  {wb.id} ({wb.status.value}) - {wb.name}{repo}")
        finally:
            await ctx.close()

    run(_list())


@workbench_group.command("archive")
@click.argument("workbench_id")
def workbench_archive(workbench_id: str):
    """Archive a workbench. Its tree is left on disk."""

    async def _archive():
        ctx = await get_context()
        try:
            wb = await ctx.catalog_service.archive_workbench(workbench_id)
            click.echo(f"Archived: {wb.id}")
        finally:
            await ctx.close()

    run(_archive())


@click.group("repo")
def repo_group():
    """Manage source repositories."""
    pass


@repo_group.command("add")
@click.argument("name")
@click.argument("local_path")
def repo_add(name: str, local_path: str):
    """Register a local git repository."""

    async def _add():
        ctx = await get_context()
        try:
            repo = await ctx.catalog_service.add_repo(name, local_path)
            click.echo(f"Registered repo: {repo.id} ({repo.name}) at {repo.local_path}")
        finally:
            await ctx.close()

    run(_add())


@repo_group.command("list")
def repo_list():
    """List registered repositories."""

    async def _list():
        ctx = await get_context()
        try:
            repos = await ctx.catalog_service.list_repos()
            if not repos:
                click.echo("No repos found.")
                return
            for r in repos:
                click.echo(f"  {r.id} - {r.name} ({r.local_path})")
        finally:
            await ctx.close()

    run(_list())
