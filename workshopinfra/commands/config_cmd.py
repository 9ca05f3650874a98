"""CLI handlers for config commands."""

from __future__ import annotations

import click

from workshopinfra.config import DEFAULT_CONFIG_PATH, init_config, load_config


@click.group("config")
def config_group():
    """Manage configuration."""
    pass


@config_group.command("init")
@click.option("--overwrite", is_flag=True, help="Replace an existing config file")
def config_init(overwrite: bool):
    """Create default configuration file."""
    if DEFAULT_CONFIG_PATH.exists() and not overwrite:
        click.echo(f"Config already exists at: {DEFAULT_CONFIG_PATH} (use --overwrite)", err=True)
        return
    path = init_config()
    click.echo(f"Configuration created at: {path}")


@config_group.command("show")
def config_show():
    """Show current configuration."""
    config = load_config()
    click.echo(f"Config file: {config.config_path}")
    click.echo(f"  Branch owner: {config.branch_owner}")
    click.echo(f"  Workbench root: {config.paths.resolved_workbench_root}")
    click.echo(f"  Gatehouse root: {config.paths.resolved_gatehouse_root}")
    click.echo(f"  Lock dir: {config.paths.resolved_lock_dir}")
    click.echo(f"  MongoDB: {config.mongodb.uri}/{config.mongodb.database}")
    click.echo(f"  tmux: {'enabled' if config.tmux.enabled else 'disabled'}")
    click.echo(f"    editor: {config.tmux.editor_command}")
    click.echo(f"    imp: {config.tmux.imp_command}")
    click.echo(f"    goblin: {config.tmux.goblin_command}")
    blocks = "yes" if config.safety.unknown_dirty_blocks_delete else "no"
    click.echo(f"  Unknown worktree status blocks delete: {blocks}")


def coerce_value(value: str):
    """Interpret a command-line string as a TOML scalar."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    return value


@config_group.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set a configuration value.

    Modifies the TOML config file. Key uses dot notation, e.g.:
    general.branch_owner, paths.workbench_root, tmux.enabled
    """
    import tomli_w

    path = DEFAULT_CONFIG_PATH
    if not path.exists():
        click.echo("No config file found. Run 'workshopinfra config init' first.", err=True)
        return

    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    with open(path, "rb") as f:
        data = tomllib.load(f)

    # Navigate dot-separated key
    parts = key.split(".")
    target = data
    for part in parts[:-1]:
        target = target.setdefault(part, {})
    target[parts[-1]] = coerce_value(value)

    with open(path, "wb") as f:
        tomli_w.dump(data, f)

    click.echo(f"Set {key} = {value}")
