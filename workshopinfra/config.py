"""Configuration loading: TOML file + environment variable overlay."""

from __future__ import annotations

import getpass
import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]


DEFAULT_CONFIG_DIR = Path.home() / ".config" / "workshopinfra"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"


def _default_branch_owner() -> str:
    """Login name used to namespace default home branches."""
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "orc"


DEFAULT_CONFIG_TOML = """\
[general]
# branch_owner defaults to the login name

[paths]
workbench_root = "~/wb"
gatehouse_root = "~/.orc/ws"
lock_dir = "~/.orc/locks"

[mongodb]
uri = "mongodb://localhost:27017"
database = "orc"

[tmux]
enabled = true
editor_command = "vim"
imp_command = "orc connect"
goblin_command = "orc connect --role goblin"

[safety]
unknown_dirty_blocks_delete = true
"""


@dataclass
class MongoConfig:
    uri: str = "mongodb://localhost:27017"
    database: str = "orc"


@dataclass
class PathsConfig:
    workbench_root: str = "~/wb"
    gatehouse_root: str = "~/.orc/ws"
    lock_dir: str = "~/.orc/locks"

    @property
    def resolved_workbench_root(self) -> Path:
        return Path(self.workbench_root).expanduser()

    @property
    def resolved_gatehouse_root(self) -> Path:
        return Path(self.gatehouse_root).expanduser()

    @property
    def resolved_lock_dir(self) -> Path:
        return Path(self.lock_dir).expanduser()


@dataclass
class TmuxConfig:
    enabled: bool = True
    editor_command: str = "vim"
    imp_command: str = "orc connect"
    goblin_command: str = "orc connect --role goblin"


@dataclass
class SafetyConfig:
    # A worktree whose git status cannot be read is not deleted unless forced.
    unknown_dirty_blocks_delete: bool = True


@dataclass
class AppConfig:
    branch_owner: str = field(default_factory=_default_branch_owner)
    paths: PathsConfig = field(default_factory=PathsConfig)
    mongodb: MongoConfig = field(default_factory=MongoConfig)
    tmux: TmuxConfig = field(default_factory=TmuxConfig)
    safety: SafetyConfig = field(default_factory=SafetyConfig)
    config_path: Path = DEFAULT_CONFIG_PATH

    def default_branch(self, workbench_name: str) -> str:
        """Home branch used when a workbench does not declare one."""
        return f"{self.branch_owner}/{workbench_name}"


def _env_overlay(config: AppConfig) -> None:
    """Override config values with environment variables where applicable."""
    if uri := os.environ.get("MONGODB_URI"):
        config.mongodb.uri = uri
    if db := os.environ.get("ORC_DB"):
        config.mongodb.database = db
    if root := os.environ.get("ORC_WORKBENCH_ROOT"):
        config.paths.workbench_root = root
    if root := os.environ.get("ORC_GATEHOUSE_ROOT"):
        config.paths.gatehouse_root = root
    if owner := os.environ.get("ORC_BRANCH_OWNER"):
        config.branch_owner = owner


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file with env var overlay."""
    path = config_path or DEFAULT_CONFIG_PATH

    if path.exists():
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    else:
        raw = tomllib.loads(DEFAULT_CONFIG_TOML)

    general = raw.get("general", {})
    paths_raw = raw.get("paths", {})
    mongo_raw = raw.get("mongodb", {})
    tmux_raw = raw.get("tmux", {})
    safety_raw = raw.get("safety", {})

    config = AppConfig(
        branch_owner=general.get("branch_owner") or _default_branch_owner(),
        paths=PathsConfig(
            workbench_root=paths_raw.get("workbench_root", "~/wb"),
            gatehouse_root=paths_raw.get("gatehouse_root", "~/.orc/ws"),
            lock_dir=paths_raw.get("lock_dir", "~/.orc/locks"),
        ),
        mongodb=MongoConfig(
            uri=mongo_raw.get("uri", "mongodb://localhost:27017"),
            database=mongo_raw.get("database", "orc"),
        ),
        tmux=TmuxConfig(
            enabled=tmux_raw.get("enabled", True),
            editor_command=tmux_raw.get("editor_command", "vim"),
            imp_command=tmux_raw.get("imp_command", "orc connect"),
            goblin_command=tmux_raw.get("goblin_command", "orc connect --role goblin"),
        ),
        safety=SafetyConfig(
            unknown_dirty_blocks_delete=safety_raw.get("unknown_dirty_blocks_delete", True),
        ),
        config_path=path,
    )

    _env_overlay(config)
    return config


def init_config(config_path: Path | None = None) -> Path:
    """Create default config file."""
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TOML)
    return path
