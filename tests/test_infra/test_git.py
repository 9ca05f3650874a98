"""Tests for git working-tree inspection."""

from __future__ import annotations

import shutil
import subprocess

import pytest

from workshopinfra.errors import GitError
from workshopinfra.infra.git import (
    GitWorkspace,
    add_worktree,
    branch_exists,
    parse_porcelain,
    worktree_status,
)

needs_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(cwd, *args):
    subprocess.run(
        ["git", "-c", "user.email=t@example.com", "-c", "user.name=Test", *args],
        cwd=cwd, check=True, capture_output=True,
    )


@pytest.fixture
def repo(tmp_path):
    path = tmp_path / "repo"
    path.mkdir()
    _git(path, "init", "-q")
    (path / "a.txt").write_text("a\n")
    (path / "b.txt").write_text("b\n")
    _git(path, "add", ".")
    _git(path, "commit", "-q", "-m", "init")
    return path


class TestParsePorcelain:
    def test_counts(self):
        out = " M a.txt\nM  b.txt\n?? c.txt\nD  d.txt\n"
        assert parse_porcelain(out) == (3, 1)

    def test_empty(self):
        assert parse_porcelain("") == (0, 0)


class TestWorktreeStatus:
    @pytest.mark.asyncio
    async def test_missing_dir_is_unknown(self, tmp_path):
        status = await worktree_status(str(tmp_path / "nope"))
        assert not status.known
        assert not status.dirty

    @needs_git
    @pytest.mark.asyncio
    async def test_clean_repo(self, repo):
        status = await worktree_status(str(repo))
        assert status.known
        assert not status.dirty

    @needs_git
    @pytest.mark.asyncio
    async def test_dirty_repo(self, repo):
        (repo / "a.txt").write_text("changed\n")
        (repo / "b.txt").write_text("changed\n")
        (repo / "c.txt").write_text("new\n")
        status = await worktree_status(str(repo))
        assert status.dirty
        assert (status.modified, status.untracked) == (2, 1)

    @needs_git
    @pytest.mark.asyncio
    async def test_workspace_adapter(self, repo, tmp_path):
        ws = GitWorkspace()
        assert await ws.exists(str(repo))
        assert not await ws.exists(str(tmp_path / "gone"))
        assert (await ws.status(str(repo))).known


class TestAddWorktree:
    @needs_git
    @pytest.mark.asyncio
    async def test_creates_branch(self, repo, tmp_path):
        target = tmp_path / "wb" / "api"
        await add_worktree(str(repo), "tester/api", str(target))
        assert (target / "a.txt").exists()
        assert await branch_exists(str(repo), "tester/api")

    @needs_git
    @pytest.mark.asyncio
    async def test_existing_target_fails(self, repo, tmp_path):
        target = tmp_path / "wb" / "api"
        target.mkdir(parents=True)
        (target / "file").write_text("x")
        with pytest.raises(GitError, match="worktree add failed"):
            await add_worktree(str(repo), "tester/api", str(target))
