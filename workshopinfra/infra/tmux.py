"""tmux adapter: session lookup, window topology and pane inspection."""

from __future__ import annotations

import asyncio
import logging
import shlex

from workshopinfra.errors import TmuxError

logger = logging.getLogger(__name__)

WORKSHOP_ENV_VAR = "ORC_WORKSHOP_ID"
AGENT_OPTION = "@orc_agent"
PLACEHOLDER_WINDOW = "__init__"


class TmuxAdapter:
    """Drives the tmux CLI.

    Query methods never raise: a missing server, session or pane reads as
    empty. Mutating methods raise TmuxError when tmux exits non-zero.
    """

    def __init__(
        self,
        editor_command: str = "vim",
        imp_command: str = "orc connect",
        goblin_command: str = "orc connect --role goblin",
    ) -> None:
        self.editor_command = editor_command
        self.imp_command = imp_command
        self.goblin_command = goblin_command

    async def _tmux(self, *args: str) -> tuple[int, str, str]:
        try:
            proc = await asyncio.create_subprocess_exec(
                "tmux", *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return 127, "", str(e)
        stdout, stderr = await proc.communicate()
        return proc.returncode, stdout.decode(errors="replace"), stderr.decode(errors="replace")

    async def _run(self, *args: str) -> str:
        rc, out, err = await self._tmux(*args)
        if rc != 0:
            raise TmuxError(f"tmux {args[0]} failed: {err.strip()}")
        return out

    async def _query(self, *args: str) -> str:
        rc, out, _ = await self._tmux(*args)
        return out.strip() if rc == 0 else ""

    # -- queries -------------------------------------------------------------

    async def list_sessions(self) -> list[str]:
        out = await self._query("list-sessions", "-F", "#{session_name}")
        return [line for line in out.splitlines() if line]

    async def get_environment(self, session: str, key: str) -> str | None:
        """Read a session environment variable; None if unset."""
        line = await self._query("show-environment", "-t", session, key)
        prefix = f"{key}="
        if line.startswith(prefix):
            return line[len(prefix):]
        return None

    async def find_session_by_workshop_id(self, workshop_id: str) -> str:
        """Return the session tagged with ``ORC_WORKSHOP_ID=workshop_id``, or ""."""
        for session in await self.list_sessions():
            if await self.get_environment(session, WORKSHOP_ENV_VAR) == workshop_id:
                return session
        return ""

    async def list_windows(self, session: str) -> list[str]:
        out = await self._query("list-windows", "-t", session, "-F", "#{window_name}")
        return [line for line in out.splitlines() if line]

    async def window_indexes(self, session: str) -> set[int]:
        out = await self._query("list-windows", "-t", session, "-F", "#{window_index}")
        return {int(line) for line in out.splitlines() if line.isdigit()}

    async def window_exists(self, session: str, window: str) -> bool:
        return window in await self.list_windows(session)

    async def get_window_option(self, target: str, option: str) -> str:
        return await self._query("show-options", "-t", target, "-wqv", option)

    async def get_pane_start_path(self, session: str, window: str, pane: int) -> str:
        return await self._query(
            "display-message", "-t", f"{session}:{window}.{pane}", "-p", "#{pane_start_path}",
        )

    async def get_pane_start_command(self, session: str, window: str, pane: int) -> str:
        return await self._query(
            "display-message", "-t", f"{session}:{window}.{pane}", "-p", "#{pane_start_command}",
        )

    # -- mutations -----------------------------------------------------------

    async def create_session(self, name: str, working_dir: str) -> None:
        """Create a detached session holding only the placeholder window."""
        await self._run(
            "new-session", "-d", "-s", name, "-n", PLACEHOLDER_WINDOW, "-c", working_dir or ".",
        )
        # Windows and panes number from 1 in workshop sessions
        await self._tmux("set-option", "-t", name, "base-index", "1")
        await self._tmux("set-option", "-t", name, "pane-base-index", "1")
        logger.info("Created tmux session %s in %s", name, working_dir)

    async def set_environment(self, session: str, key: str, value: str) -> None:
        await self._run("set-environment", "-t", session, key, value)

    async def set_window_option(self, target: str, option: str, value: str) -> None:
        await self._run("set-option", "-w", "-t", target, option, value)

    async def rename_window(self, session: str, window: str, new_name: str) -> None:
        await self._run("rename-window", "-t", f"{session}:{window}", new_name)

    async def create_workbench_window(
        self, session: str, index: int, name: str, working_dir: str
    ) -> None:
        """Create a window laid out as editor | IMP / shell."""
        await self._new_window(session, index, name, working_dir, self.imp_command)

    async def create_goblin_window(
        self, session: str, index: int, name: str, working_dir: str
    ) -> None:
        """Recreate the goblin window in an existing session."""
        await self._new_window(session, index, name, working_dir, self.goblin_command)

    async def _new_window(
        self, session: str, index: int, name: str, working_dir: str, agent_command: str
    ) -> None:
        if index in await self.window_indexes(session):
            logger.debug("Window index %d taken in %s, appending %s", index, session, name)
            target = f"{session}:"
        else:
            target = f"{session}:{index}"
        await self._run("new-window", "-d", "-t", target, "-n", name, "-c", working_dir)
        await self._layout(f"{session}:{name}", working_dir, agent_command)
        logger.info("Created tmux window %s:%s", session, name)

    async def setup_goblin_pane(self, session: str, window: str, working_dir: str) -> None:
        """Lay out the bootstrap window as editor | goblin / shell."""
        await self._layout(f"{session}:{window}", working_dir, self.goblin_command)

    async def _layout(self, target: str, working_dir: str, agent_command: str) -> None:
        await self._run("split-window", "-h", "-t", target, "-c", working_dir)
        await self._run("split-window", "-v", "-t", f"{target}.2", "-c", working_dir)
        # respawn-pane records pane_start_command, which the planner verifies
        await self._run(
            "respawn-pane", "-k", "-t", f"{target}.1", *shlex.split(self.editor_command),
        )
        await self._run("respawn-pane", "-k", "-t", f"{target}.2", *shlex.split(agent_command))

    async def kill_window(self, session: str, window: str) -> None:
        await self._run("kill-window", "-t", f"{session}:{window}")
        logger.info("Killed tmux window %s:%s", session, window)

    async def kill_session(self, session: str) -> None:
        await self._run("kill-session", "-t", session)
        logger.info("Killed tmux session %s", session)
