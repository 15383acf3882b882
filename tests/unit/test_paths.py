"""
Unit tests for path resolution utilities.

Tests the priority system (ENV var > default home directory) used for the
config file and the persisted state file.
"""

from pathlib import Path

import pytest

from contentrouter.app_utils.paths import get_default_state_file, get_user_data_dir


@pytest.mark.unit
class TestUserDataDir:
    """Tests for get_user_data_dir priority resolution."""

    def test_default_path_when_no_override(self, monkeypatch):
        """Default path is ~/.contentrouter."""
        monkeypatch.delenv("CONTENTROUTER_HOME", raising=False)

        assert get_user_data_dir() == Path.home() / ".contentrouter"

    def test_env_var_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CONTENTROUTER_HOME", str(tmp_path / "router"))

        assert get_user_data_dir() == tmp_path / "router"

    def test_empty_env_var_ignored(self, monkeypatch):
        monkeypatch.setenv("CONTENTROUTER_HOME", "")

        assert get_user_data_dir() == Path.home() / ".contentrouter"

    def test_state_file_under_data_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CONTENTROUTER_HOME", str(tmp_path))

        assert get_default_state_file() == tmp_path / "state.json"
