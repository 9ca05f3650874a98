"""On-disk layout conventions for workbenches and gatehouses."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from workshopinfra.config import AppConfig
from workshopinfra.models.descriptor import CONTROL_DIR, DESCRIPTOR_NAME
from workshopinfra.models.workshop import slugify


@dataclass(frozen=True)
class InfraLayout:
    """Where each kind of place lives.

    Workbench trees sit at ``<workbench_root>/<name>``; gatehouses at
    ``<gatehouse_root>/<WORK-id>-<slug>``. Both hold ``.orc/config.json``.
    """

    workbench_root: Path
    gatehouse_root: Path

    @classmethod
    def from_config(cls, config: AppConfig) -> InfraLayout:
        return cls(
            workbench_root=config.paths.resolved_workbench_root,
            gatehouse_root=config.paths.resolved_gatehouse_root,
        )

    def workbench_path(self, name: str) -> Path:
        return _child(self.workbench_root, name)

    def gatehouse_path(self, workshop_id: str, workshop_name: str) -> Path:
        return _child(self.gatehouse_root, f"{workshop_id}-{slugify(workshop_name)}")

    @property
    def workbench_descriptor_glob(self) -> str:
        return f"*/{CONTROL_DIR}/{DESCRIPTOR_NAME}"

    @property
    def gatehouse_descriptor_glob(self) -> str:
        return f"WORK-*/{CONTROL_DIR}/{DESCRIPTOR_NAME}"


def _child(root: Path, name: str) -> Path:
    """``root / name``, refusing anything that resolves outside ``root``.

    Symlinks are followed, so a place linked elsewhere is refused as well.
    """
    path = root / name
    if name in ("", ".", "..") or path.resolve().parent != root.resolve():
        raise ValueError(f"{name!r} resolves outside {root}")
    return path
