"""Exception hierarchy for infrastructure reconciliation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from workshopinfra.models.effects import Effect


class InfraError(Exception):
    """Base class for all reconciliation errors."""


class NotFoundError(InfraError):
    """A catalog record the operation depends on does not exist."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class DirtyWorktreeError(InfraError):
    """Refusing to delete a working tree that may hold uncommitted work."""

    def __init__(
        self, place_id: str, modified: int = 0, untracked: int = 0, known: bool = True
    ) -> None:
        if known:
            message = (
                f"cannot delete {place_id}: worktree has uncommitted changes "
                f"({modified} modified, {untracked} untracked). Use --force to override"
            )
        else:
            message = (
                f"cannot delete {place_id}: worktree status could not be determined. "
                "Use --force to override"
            )
        super().__init__(message)
        self.place_id = place_id
        self.modified = modified
        self.untracked = untracked
        self.known = known


class EffectExecutionError(InfraError):
    """An effect failed; effects applied before it are left in place."""

    def __init__(self, effect: Effect, cause: BaseException) -> None:
        super().__init__(f"failed to execute {effect.kind} effect: {cause}")
        self.effect = effect
        self.cause = cause


class TmuxError(InfraError):
    """A tmux command exited non-zero."""


class GitError(InfraError):
    """A git command exited non-zero."""


class InfraLockError(InfraError):
    """Another reconciliation currently holds the workshop lock."""

    def __init__(self, key: str) -> None:
        super().__init__(f"another reconciliation is running for {key}")
        self.key = key


class CatalogUnavailableError(InfraError):
    """The MongoDB catalog did not answer."""

    def __init__(self, uri: str) -> None:
        super().__init__(f"cannot reach the catalog database at {uri}")
        self.uri = uri
