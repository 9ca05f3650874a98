"""Filesystem checks and the per-workshop advisory lock."""

from __future__ import annotations

import fcntl
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from workshopinfra.errors import InfraLockError

logger = logging.getLogger(__name__)


def dir_exists(path: str | Path) -> bool:
    try:
        return Path(path).is_dir()
    except OSError:
        return False


def file_exists(path: str | Path) -> bool:
    try:
        return Path(path).is_file()
    except OSError:
        return False


@contextmanager
def workshop_lock(lock_dir: Path, key: str) -> Iterator[Path]:
    """Hold an exclusive flock on ``<lock_dir>/<key>.lock`` for the block.

    Non-blocking: a lock held by another process raises InfraLockError
    instead of waiting.
    """
    lock_dir.mkdir(parents=True, exist_ok=True)
    lock_path = lock_dir / f"{key}.lock"
    with lock_path.open("a+", encoding="utf-8") as fh:
        try:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as e:
            raise InfraLockError(key) from e
        logger.debug("Acquired lock %s", lock_path)
        try:
            yield lock_path
        finally:
            fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
