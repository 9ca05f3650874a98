"""Tests for on-disk orphan detection."""

from __future__ import annotations

import pytest
from fakes import FakeGatehouseRepo, FakeWorkbenchRepo, make_layout

from workshopinfra.models.descriptor import PlaceDescriptor, descriptor_path
from workshopinfra.models.gatehouse import Gatehouse
from workshopinfra.models.workbench import Workbench
from workshopinfra.services.orphan_scanner import OrphanScanner


def _place(root, name, place_id=None, raw=None):
    place = root / name
    path = descriptor_path(place)
    path.parent.mkdir(parents=True)
    path.write_text(raw if raw is not None else PlaceDescriptor(place_id).to_json())
    return place


@pytest.fixture
def repos():
    return FakeWorkbenchRepo(), FakeGatehouseRepo()


@pytest.fixture
def scanner(tmp_path, repos):
    wb_repo, gh_repo = repos
    return OrphanScanner(make_layout(tmp_path), wb_repo, gh_repo)


class TestOrphanScanner:
    @pytest.mark.asyncio
    async def test_missing_roots(self, scanner):
        assert await scanner.scan() == ([], [])

    @pytest.mark.asyncio
    async def test_unknown_ids_are_orphans(self, tmp_path, scanner):
        place = _place(tmp_path / "wb", "old", "BENCH-009")
        gate = _place(tmp_path / "ws", "WORK-009-gone", "GATE-009")
        wbs, ghs = await scanner.scan()
        assert [(o.id, o.name, o.path) for o in wbs] == [("BENCH-009", "old", str(place))]
        assert [(g.place_id, g.path) for g in ghs] == [("GATE-009", str(gate))]

    @pytest.mark.asyncio
    async def test_known_set_is_never_orphan(self, tmp_path, scanner):
        _place(tmp_path / "wb", "api", "BENCH-001")
        _place(tmp_path / "ws", "WORK-001-alpha", "GATE-001")
        wbs, ghs = await scanner.scan(["BENCH-001"], "GATE-001")
        assert wbs == []
        assert ghs == []

    @pytest.mark.asyncio
    async def test_catalog_hit_is_not_orphan(self, tmp_path, scanner, repos):
        wb_repo, gh_repo = repos
        # Archived or belonging to another workshop: still in the catalog
        await wb_repo.insert(Workbench(id="BENCH-002", name="web", workshop_id="WORK-002"))
        await gh_repo.insert(Gatehouse(id="GATE-002", workshop_id="WORK-002"))
        _place(tmp_path / "wb", "web", "BENCH-002")
        _place(tmp_path / "ws", "WORK-002-beta", "GATE-002")
        assert await scanner.scan() == ([], [])

    @pytest.mark.asyncio
    async def test_malformed_and_foreign_descriptors_skipped(self, tmp_path, scanner):
        _place(tmp_path / "wb", "broken", raw="{nope")
        _place(tmp_path / "wb", "blank", raw='{"version": "1.0"}')
        _place(tmp_path / "wb", "gate-in-wb", "GATE-005")
        _place(tmp_path / "ws", "WORK-005-x", "BENCH-005")
        _place(tmp_path / "ws", "notes", "GATE-006")  # outside WORK-* pattern
        assert await scanner.scan() == ([], [])

    @pytest.mark.asyncio
    async def test_sorted_by_path(self, tmp_path, scanner):
        _place(tmp_path / "wb", "zeta", "BENCH-010")
        _place(tmp_path / "wb", "alpha", "BENCH-011")
        wbs, _ = await scanner.scan()
        assert [o.name for o in wbs] == ["alpha", "zeta"]
