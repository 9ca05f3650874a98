"""Tests for catalog models and the place descriptor."""

from __future__ import annotations

import json

import pytest

from workshopinfra.models.descriptor import PlaceDescriptor, descriptor_path
from workshopinfra.models.gatehouse import Gatehouse, goblin_window_name
from workshopinfra.models.workbench import Workbench, WorkbenchStatus
from workshopinfra.models.workshop import Workshop, WorkshopStatus, slugify


class TestSlugify:
    def test_spaces_and_case(self):
        assert slugify("Alpha Team") == "alpha-team"

    def test_underscores_and_punctuation(self):
        assert slugify("Ops_Crew #2!") == "ops-crew-2"


class TestWorkshop:
    def test_empty_name_rejected(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            Workshop(id="WORK-001", name="", factory_id="FACT-001")

    def test_doc_roundtrip(self):
        w = Workshop(
            id="WORK-003", name="Alpha Team", factory_id="FACT-001",
            status=WorkshopStatus.ARCHIVED,
        )
        doc = w.to_doc()
        assert doc["_id"] == "WORK-003"
        assert doc["status"] == "archived"
        restored = Workshop.from_doc(doc)
        assert restored == w
        assert restored.is_archived
        assert restored.slug == "alpha-team"


class TestWorkbench:
    def test_agent_tag(self):
        wb = Workbench(id="BENCH-004", name="api", workshop_id="WORK-001")
        assert wb.agent_tag == "IMP-api@BENCH-004"

    def test_slash_in_name_rejected(self):
        with pytest.raises(ValueError, match="cannot contain"):
            Workbench(id="BENCH-001", name="a/b", workshop_id="WORK-001")

    @pytest.mark.parametrize("name", [".", ".."])
    def test_dot_names_rejected(self, name):
        with pytest.raises(ValueError, match="cannot be"):
            Workbench(id="BENCH-001", name=name, workshop_id="WORK-001")

    def test_from_doc_defaults(self):
        wb = Workbench.from_doc({"_id": "BENCH-001", "name": "api", "workshop_id": "WORK-001"})
        assert wb.repo_id == ""
        assert wb.status == WorkbenchStatus.ACTIVE
        assert not wb.is_archived


class TestGatehouse:
    def test_goblin_window_name(self):
        assert goblin_window_name("GATE-007") == "goblin-007"

    def test_agent_tag(self):
        assert Gatehouse(id="GATE-002", workshop_id="WORK-001").agent_tag == "GOBLIN@GATE-002"


class TestPlaceDescriptor:
    def test_json_shape(self):
        data = json.loads(PlaceDescriptor("BENCH-001").to_json())
        assert data == {"version": "1.0", "place_id": "BENCH-001"}

    def test_missing_place_id_reads_empty(self):
        assert PlaceDescriptor.from_json('{"version": "1.0"}').place_id == ""

    def test_non_object_rejected(self):
        with pytest.raises(ValueError):
            PlaceDescriptor.from_json("[1, 2]")

    def test_malformed_json_rejected(self):
        with pytest.raises(ValueError):
            PlaceDescriptor.from_json("{not json")

    def test_read_from_disk(self, tmp_path):
        path = descriptor_path(tmp_path)
        path.parent.mkdir()
        path.write_text(PlaceDescriptor("GATE-001").to_json())
        assert PlaceDescriptor.read(path).place_id == "GATE-001"
