"""Tests for config loading."""

from pathlib import Path

from workshopinfra.config import AppConfig, PathsConfig, init_config, load_config


class TestConfig:
    def test_load_defaults(self, monkeypatch):
        """Loading with no file should return defaults."""
        for var in ("MONGODB_URI", "ORC_DB", "ORC_WORKBENCH_ROOT", "ORC_GATEHOUSE_ROOT"):
            monkeypatch.delenv(var, raising=False)
        config = load_config(Path("/nonexistent/config.toml"))
        assert config.mongodb.uri == "mongodb://localhost:27017"
        assert config.mongodb.database == "orc"
        assert config.paths.workbench_root == "~/wb"
        assert config.tmux.enabled is True
        assert config.tmux.goblin_command == "orc connect --role goblin"
        assert config.safety.unknown_dirty_blocks_delete is True

    def test_resolved_paths(self):
        paths = PathsConfig(workbench_root="~/wb-test")
        assert "~" not in str(paths.resolved_workbench_root)
        assert str(paths.resolved_gatehouse_root).endswith(".orc/ws")

    def test_default_branch(self):
        config = AppConfig(branch_owner="ana")
        assert config.default_branch("api") == "ana/api"

    def test_init_config(self, tmp_path):
        path = tmp_path / "config.toml"
        result = init_config(path)
        assert result == path
        assert path.exists()
        # Should be loadable
        config = load_config(path)
        assert config.mongodb.database == "orc"
        assert config.config_path == path

    def test_file_values(self, tmp_path, monkeypatch):
        monkeypatch.delenv("ORC_BRANCH_OWNER", raising=False)
        path = tmp_path / "config.toml"
        path.write_text(
            '[general]\nbranch_owner = "ops"\n'
            '[safety]\nunknown_dirty_blocks_delete = false\n'
            '[tmux]\nenabled = false\n'
        )
        config = load_config(path)
        assert config.branch_owner == "ops"
        assert config.safety.unknown_dirty_blocks_delete is False
        assert config.tmux.enabled is False
        # Missing sections fall back to defaults
        assert config.paths.gatehouse_root == "~/.orc/ws"

    def test_env_overlay(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://db:27017")
        monkeypatch.setenv("ORC_DB", "orc_test")
        monkeypatch.setenv("ORC_WORKBENCH_ROOT", str(tmp_path / "wb"))
        monkeypatch.setenv("ORC_BRANCH_OWNER", "ci")
        config = load_config(tmp_path / "missing.toml")
        assert config.mongodb.uri == "mongodb://db:27017"
        assert config.mongodb.database == "orc_test"
        assert config.paths.resolved_workbench_root == tmp_path / "wb"
        assert config.branch_owner == "ci"
