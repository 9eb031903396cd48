"""Tests for configuration"""
import pytest

from git_worktree_keeper.config import Config, DEFAULT_CONCURRENCY


class TestConfig:
    """Test Config validation"""

    def test_defaults(self):
        config = Config()
        assert config.concurrency == DEFAULT_CONCURRENCY == 5
        assert config.worktrees_base is None
        assert config.directory_prefix == ""
        assert config.remote_name == "origin"

    @pytest.mark.parametrize("concurrency", [0, -1])
    def test_concurrency_must_be_positive(self, concurrency):
        with pytest.raises(ValueError, match="concurrency"):
            Config(concurrency=concurrency)

    @pytest.mark.parametrize("prefix", ["../", "a/../b", ".."])
    def test_prefix_cannot_escape(self, prefix):
        with pytest.raises(ValueError):
            Config(directory_prefix=prefix)
        with pytest.raises(ValueError):
            Config(branch_prefix=prefix)

    def test_directory_prefix_must_be_relative(self):
        with pytest.raises(ValueError, match="relative"):
            Config(directory_prefix="/abs-")

    def test_remote_name_required(self):
        with pytest.raises(ValueError):
            Config(remote_name="  ")
        assert Config(remote_name=" upstream ").remote_name == "upstream"

    def test_none_prefix_becomes_empty(self):
        assert Config(directory_prefix=None).directory_prefix == ""

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"concurrency": 3, "branch_prefix": "feat/", "colour": "blue"})
        assert config.concurrency == 3
        assert config.branch_prefix == "feat/"
        assert config.to_dict()["concurrency"] == 3
        assert config.get("missing", "fallback") == "fallback"
