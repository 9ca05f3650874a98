"""Tests for on-disk layout paths."""

from __future__ import annotations

import pytest

from workshopinfra.layout import InfraLayout


@pytest.fixture
def layout(tmp_path):
    return InfraLayout(workbench_root=tmp_path / "wb", gatehouse_root=tmp_path / "ws")


class TestInfraLayout:
    def test_workbench_path(self, layout, tmp_path):
        assert layout.workbench_path("api") == tmp_path / "wb" / "api"

    def test_gatehouse_path(self, layout, tmp_path):
        assert layout.gatehouse_path("WORK-001", "Alpha Team") == (
            tmp_path / "ws" / "WORK-001-alpha-team"
        )

    @pytest.mark.parametrize("name", ["", ".", "..", "../elsewhere", "a/b"])
    def test_workbench_path_stays_under_root(self, layout, name):
        with pytest.raises(ValueError, match="resolves outside"):
            layout.workbench_path(name)

    def test_gatehouse_path_stays_under_root(self, layout):
        with pytest.raises(ValueError, match="resolves outside"):
            layout.gatehouse_path("../../tmp", "x")

    def test_symlink_out_of_root_refused(self, layout, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (tmp_path / "wb").mkdir()
        (tmp_path / "wb" / "api").symlink_to(outside)
        with pytest.raises(ValueError, match="resolves outside"):
            layout.workbench_path("api")

    def test_descriptor_globs(self, layout):
        assert layout.workbench_descriptor_glob == "*/.orc/config.json"
        assert layout.gatehouse_descriptor_glob == "WORK-*/.orc/config.json"
