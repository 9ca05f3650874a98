"""Git working-tree operations: status inspection and worktree checkout."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from workshopinfra.errors import GitError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorktreeStatus:
    """Result of ``git status --porcelain`` on a working tree.

    ``known`` is False when the status could not be read (missing
    directory, git not installed, broken repository). Such a tree reports
    as clean. A plain directory outside any git work tree is known-clean.
    """

    dirty: bool = False
    modified: int = 0
    untracked: int = 0
    known: bool = True


UNKNOWN_STATUS = WorktreeStatus(known=False)


async def _git(*args: str, cwd: str) -> tuple[int, str, str]:
    proc = await asyncio.create_subprocess_exec(
        "git", *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()
    return (
        proc.returncode,
        stdout.decode(errors="replace"),
        stderr.decode(errors="replace").strip(),
    )


async def is_git_repo(path: str) -> bool:
    """Check if a path is inside a git work tree."""
    try:
        rc, out, _ = await _git("rev-parse", "--is-inside-work-tree", cwd=path)
    except OSError:
        return False
    return rc == 0 and out.strip() == "true"


def parse_porcelain(output: str) -> tuple[int, int]:
    """Count (modified, untracked) entries in porcelain v1 output."""
    modified = 0
    untracked = 0
    for line in output.splitlines():
        if len(line) < 2:
            continue
        if line.startswith("??"):
            untracked += 1
        else:
            modified += 1
    return modified, untracked


async def worktree_status(path: str) -> WorktreeStatus:
    """Inspect a working tree for uncommitted changes."""
    if not Path(path).is_dir():
        return UNKNOWN_STATUS
    try:
        rc, out, err = await _git("status", "--porcelain", cwd=path)
    except OSError:
        logger.debug("git unavailable while inspecting %s", path, exc_info=True)
        return UNKNOWN_STATUS
    if rc != 0:
        if not await is_git_repo(path):
            # Plain directory: nothing uncommitted to lose
            return WorktreeStatus()
        logger.debug("git status failed in %s: %s", path, err)
        return UNKNOWN_STATUS
    modified, untracked = parse_porcelain(out)
    return WorktreeStatus(
        dirty=modified > 0 or untracked > 0,
        modified=modified,
        untracked=untracked,
    )


async def branch_exists(repo_path: str, branch: str) -> bool:
    rc, _, _ = await _git(
        "rev-parse", "--verify", "--quiet", f"refs/heads/{branch}", cwd=repo_path,
    )
    return rc == 0


async def add_worktree(repo_path: str, branch: str, target_path: str) -> str:
    """Check out ``branch`` of ``repo_path`` into ``target_path``.

    The branch is created from the repository's HEAD when it does not exist.
    Returns the worktree path.
    """
    Path(target_path).parent.mkdir(parents=True, exist_ok=True)
    if await branch_exists(repo_path, branch):
        args = ("worktree", "add", target_path, branch)
    else:
        args = ("worktree", "add", "-b", branch, target_path)
    rc, _, err = await _git(*args, cwd=repo_path)
    if rc != 0:
        raise GitError(f"git worktree add failed (rc={rc}): {err}")

    logger.info("Created worktree %s on branch %s", target_path, branch)
    return target_path


class GitWorkspace:
    """Working-tree adapter handed to the infra service."""

    async def exists(self, path: str) -> bool:
        return Path(path).is_dir()

    async def status(self, path: str) -> WorktreeStatus:
        return await worktree_status(path)
