"""Effect executors: turn effect values into filesystem, git and tmux calls."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Sequence
from pathlib import Path

from workshopinfra.errors import EffectExecutionError, InfraError, TmuxError
from workshopinfra.infra import git as git_ops
from workshopinfra.infra.tmux import TmuxAdapter
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
    describe,
)

logger = logging.getLogger(__name__)


class EffectExecutor:
    """Executes effects against the real system, in order.

    The first failure is wrapped in EffectExecutionError and the remaining
    effects are skipped. Effects already applied stay applied.
    """

    dry_run = False

    def __init__(self, tmux: TmuxAdapter | None = None) -> None:
        self._tmux = tmux

    async def execute(self, effects: Sequence[Effect]) -> None:
        for effect in effects:
            logger.debug("Executing %s", describe(effect))
            try:
                await self._execute_one(effect)
            except (OSError, InfraError) as e:
                raise EffectExecutionError(effect, e) from e

    async def _execute_one(self, effect: Effect) -> None:
        if isinstance(effect, Mkdir):
            Path(effect.path).mkdir(mode=effect.mode, parents=True, exist_ok=True)
        elif isinstance(effect, WriteFile):
            path = Path(effect.path)
            path.write_text(effect.content)
            os.chmod(path, effect.mode)
        elif isinstance(effect, RemoveDir):
            if Path(effect.path).exists():
                shutil.rmtree(effect.path)
        elif isinstance(effect, GitWorktreeAdd):
            await git_ops.add_worktree(effect.repo_path, effect.branch, effect.target_path)
        elif isinstance(effect, TmuxCreateSession):
            await self._require_tmux().create_session(effect.session, effect.working_dir)
        elif isinstance(effect, TmuxSetEnvironment):
            await self._require_tmux().set_environment(effect.session, effect.key, effect.value)
        elif isinstance(effect, TmuxRenameWindow):
            await self._require_tmux().rename_window(
                effect.session, effect.window, effect.new_name,
            )
        elif isinstance(effect, TmuxCreateWindow) and effect.goblin:
            await self._require_tmux().create_goblin_window(
                effect.session, effect.index, effect.name, effect.working_dir,
            )
        elif isinstance(effect, TmuxCreateWindow):
            await self._require_tmux().create_workbench_window(
                effect.session, effect.index, effect.name, effect.working_dir,
            )
        elif isinstance(effect, TmuxSetupGoblinPane):
            await self._require_tmux().setup_goblin_pane(
                effect.session, effect.window, effect.working_dir,
            )
        elif isinstance(effect, TmuxSetOption):
            await self._require_tmux().set_window_option(
                effect.target, effect.option, effect.value,
            )
        elif isinstance(effect, TmuxKillWindow):
            await self._require_tmux().kill_window(effect.session, effect.window)
        elif isinstance(effect, TmuxKillSession):
            await self._require_tmux().kill_session(effect.session)
        else:
            raise TypeError(f"unknown effect type: {type(effect).__name__}")

    def _require_tmux(self) -> TmuxAdapter:
        if self._tmux is None:
            raise TmuxError("tmux is not configured")
        return self._tmux


class RecordingEffectExecutor:
    """Collects effects instead of applying them. Used for dry runs."""

    dry_run = True

    def __init__(self) -> None:
        self.effects: list[Effect] = []

    async def execute(self, effects: Sequence[Effect]) -> None:
        for effect in effects:
            describe(effect)  # rejects unknown effect types
            self.effects.append(effect)

    def of_kind(self, effect_type: type) -> list[Effect]:
        return [e for e in self.effects if isinstance(e, effect_type)]
