"""Finds on-disk places whose descriptor names no catalog record."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from workshopinfra.infra.db.gatehouses import GatehouseRepo
from workshopinfra.infra.db.workbenches import WorkbenchRepo
from workshopinfra.layout import InfraLayout
from workshopinfra.models.descriptor import PlaceDescriptor
from workshopinfra.models.plan import GatehouseInput, WorkbenchInput

logger = logging.getLogger(__name__)

WORKBENCH_ID_PREFIX = "BENCH-"
GATEHOUSE_ID_PREFIX = "GATE-"


class OrphanScanner:
    """Scans the workbench and gatehouse roots for orphaned descriptors.

    A place is an orphan only when its id is neither in the caller's
    known-set nor found by a fresh catalog lookup.
    """

    def __init__(
        self,
        layout: InfraLayout,
        workbench_repo: WorkbenchRepo,
        gatehouse_repo: GatehouseRepo,
    ) -> None:
        self._layout = layout
        self._workbenches = workbench_repo
        self._gatehouses = gatehouse_repo

    async def scan(
        self,
        known_workbench_ids: Iterable[str] = (),
        known_gatehouse_id: str = "",
    ) -> tuple[list[WorkbenchInput], list[GatehouseInput]]:
        known_wb = set(known_workbench_ids)

        orphan_wbs: list[WorkbenchInput] = []
        for place_dir, place_id in self._descriptors(
            self._layout.workbench_root,
            self._layout.workbench_descriptor_glob,
            WORKBENCH_ID_PREFIX,
        ):
            if place_id in known_wb:
                continue
            if await self._workbenches.find_by_id(place_id) is not None:
                continue
            logger.debug("Orphan workbench %s at %s", place_id, place_dir)
            orphan_wbs.append(WorkbenchInput(
                id=place_id,
                name=place_dir.name,
                path=str(place_dir),
                exists=True,
                config_exists=True,
            ))

        orphan_ghs: list[GatehouseInput] = []
        for place_dir, place_id in self._descriptors(
            self._layout.gatehouse_root,
            self._layout.gatehouse_descriptor_glob,
            GATEHOUSE_ID_PREFIX,
        ):
            if known_gatehouse_id and place_id == known_gatehouse_id:
                continue
            if await self._gatehouses.find_by_id(place_id) is not None:
                continue
            logger.debug("Orphan gatehouse %s at %s", place_id, place_dir)
            orphan_ghs.append(GatehouseInput(place_id=place_id, path=str(place_dir)))

        orphan_wbs.sort(key=lambda wb: wb.path)
        orphan_ghs.sort(key=lambda gh: gh.path)
        return orphan_wbs, orphan_ghs

    @staticmethod
    def _descriptors(root: Path, pattern: str, prefix: str) -> list[tuple[Path, str]]:
        """(place dir, place id) for each readable descriptor whose id has ``prefix``."""
        if not root.is_dir():
            return []
        found = []
        for config_path in sorted(root.glob(pattern)):
            try:
                descriptor = PlaceDescriptor.read(config_path)
            except (OSError, ValueError):
                logger.debug("Skipping unreadable descriptor %s", config_path)
                continue
            if not descriptor.place_id.startswith(prefix):
                continue
            # <place>/.orc/config.json
            found.append((config_path.parent.parent, descriptor.place_id))
        return found
