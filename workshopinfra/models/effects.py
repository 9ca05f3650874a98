"""Effects: side-effecting instructions represented as plain data.

The apply driver only ever builds these values; an executor (see
``services.effect_executor``) turns them into filesystem, git and tmux calls.
Keeping them as data lets a dry run print exactly what would happen and lets
tests substitute a recording executor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union


@dataclass(frozen=True)
class Mkdir:
    kind: ClassVar[str] = "mkdir"

    path: str
    mode: int = 0o755


@dataclass(frozen=True)
class WriteFile:
    kind: ClassVar[str] = "write-file"

    path: str
    content: str
    mode: int = 0o644


@dataclass(frozen=True)
class RemoveDir:
    kind: ClassVar[str] = "remove-dir"

    path: str


@dataclass(frozen=True)
class GitWorktreeAdd:
    kind: ClassVar[str] = "git-worktree-add"

    repo_path: str
    branch: str
    target_path: str


@dataclass(frozen=True)
class TmuxCreateSession:
    kind: ClassVar[str] = "tmux-create-session"

    session: str
    working_dir: str


@dataclass(frozen=True)
class TmuxSetEnvironment:
    kind: ClassVar[str] = "tmux-set-environment"

    session: str
    key: str
    value: str


@dataclass(frozen=True)
class TmuxRenameWindow:
    kind: ClassVar[str] = "tmux-rename-window"

    session: str
    window: str
    new_name: str


@dataclass(frozen=True)
class TmuxCreateWindow:
    kind: ClassVar[str] = "tmux-create-window"

    session: str
    index: int
    name: str
    working_dir: str
    goblin: bool = False  # lay out as the goblin window instead of a workbench


@dataclass(frozen=True)
class TmuxSetupGoblinPane:
    kind: ClassVar[str] = "tmux-setup-goblin-pane"

    session: str
    window: str
    working_dir: str


@dataclass(frozen=True)
class TmuxSetOption:
    kind: ClassVar[str] = "tmux-set-option"

    target: str
    option: str
    value: str


@dataclass(frozen=True)
class TmuxKillWindow:
    kind: ClassVar[str] = "tmux-kill-window"

    session: str
    window: str


@dataclass(frozen=True)
class TmuxKillSession:
    kind: ClassVar[str] = "tmux-kill-session"

    session: str


Effect = Union[
    Mkdir,
    WriteFile,
    RemoveDir,
    GitWorktreeAdd,
    TmuxCreateSession,
    TmuxSetEnvironment,
    TmuxRenameWindow,
    TmuxCreateWindow,
    TmuxSetupGoblinPane,
    TmuxSetOption,
    TmuxKillWindow,
    TmuxKillSession,
]


def describe(effect: Effect) -> str:
    """One-line human readable rendering, used by dry runs."""
    if isinstance(effect, Mkdir):
        return f"mkdir {effect.path}"
    if isinstance(effect, WriteFile):
        return f"write {effect.path} ({len(effect.content)} bytes)"
    if isinstance(effect, RemoveDir):
        return f"rm -rf {effect.path}"
    if isinstance(effect, GitWorktreeAdd):
        return f"git -C {effect.repo_path} worktree add {effect.target_path} {effect.branch}"
    if isinstance(effect, TmuxCreateSession):
        return f"tmux new-session -s {effect.session} -c {effect.working_dir}"
    if isinstance(effect, TmuxSetEnvironment):
        return f"tmux set-environment -t {effect.session} {effect.key} {effect.value}"
    if isinstance(effect, TmuxRenameWindow):
        return f"tmux rename-window -t {effect.session}:{effect.window} {effect.new_name}"
    if isinstance(effect, TmuxCreateWindow):
        text = (
            f"tmux new-window -t {effect.session}:{effect.index} "
            f"-n {effect.name} -c {effect.working_dir}"
        )
        return text + " (goblin)" if effect.goblin else text
    if isinstance(effect, TmuxSetupGoblinPane):
        return f"setup goblin panes in {effect.session}:{effect.window}"
    if isinstance(effect, TmuxSetOption):
        return f"tmux set-option -w -t {effect.target} {effect.option} {effect.value}"
    if isinstance(effect, TmuxKillWindow):
        return f"tmux kill-window -t {effect.session}:{effect.window}"
    if isinstance(effect, TmuxKillSession):
        return f"tmux kill-session -t {effect.session}"
    raise TypeError(f"unknown effect type: {type(effect).__name__}")
