"""CLI helpers shared by command groups."""

from __future__ import annotations

import asyncio

import click

from workshopinfra.context import AppContext
from workshopinfra.errors import InfraError


def run(coro):
    """Run an async function from sync context, surfacing domain errors as click errors."""
    try:
        return asyncio.run(coro)
    except InfraError as e:
        raise click.ClickException(str(e)) from e
    except ValueError as e:
        raise click.ClickException(str(e)) from e


async def get_context() -> AppContext:
    """Create an AppContext connected to MongoDB."""
    ctx = AppContext()
    await ctx.initialize()
    return ctx
