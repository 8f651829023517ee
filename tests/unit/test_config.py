"""Unit tests for configuration module."""

import pytest

from slack_approval.config import Config, RunMetadata
from slack_approval.errors import ConfigurationError


class TestRunMetadata:
    """Tests for RunMetadata URLs."""

    def test_actions_url(self, run_metadata):
        """Actions URL points at the run page."""
        assert run_metadata.actions_url == "https://github.com/org/repo/actions/runs/42"

    def test_repository_url(self, run_metadata):
        assert run_metadata.repository_url == "https://github.com/org/repo"

    def test_defaults_are_empty(self):
        metadata = RunMetadata()

        assert metadata.actor == ""
        assert metadata.actions_url == "//actions/runs/"


class TestConfig:
    """Tests for Config loading and validation."""

    def test_reads_environment(self, monkeypatch):
        """Settings are read from environment variables."""
        monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-env")
        monkeypatch.setenv("SLACK_CHANNEL_ID", "C999")
        monkeypatch.setenv("INPUT_BLOCKS", '[{"type": "divider"}]')
        monkeypatch.setenv("GITHUB_RUN_ID", "7")

        config = Config(_env_file=None)

        assert config.SLACK_BOT_TOKEN == "xoxb-env"
        assert config.SLACK_CHANNEL_ID == "C999"
        assert config.INPUT_BLOCKS == '[{"type": "divider"}]'
        assert config.run_metadata.run_id == "7"

    def test_run_metadata_from_settings(self, gate_config):
        metadata = gate_config.run_metadata

        assert metadata.actor == "alice"
        assert metadata.workflow == "CI"
        assert metadata.runner_os == "Linux"
        assert metadata.actions_url == "https://github.com/org/repo/actions/runs/42"

    def test_validate_required_complete(self, gate_config):
        """A complete configuration has no errors."""
        assert gate_config.validate_required() == []

    def test_validate_required_missing(self, monkeypatch):
        """Every missing credential is reported."""
        for name in ("SLACK_BOT_TOKEN", "SLACK_SIGNING_SECRET", "SLACK_APP_TOKEN", "SLACK_CHANNEL_ID"):
            monkeypatch.delenv(name, raising=False)

        errors = Config(_env_file=None).validate_required()

        assert len(errors) == 4
        assert "SLACK_BOT_TOKEN is required" in errors
        assert "SLACK_CHANNEL_ID is required" in errors

    def test_ensure_valid_raises(self, gate_config):
        config = gate_config.model_copy(update={"SLACK_APP_TOKEN": ""})

        with pytest.raises(ConfigurationError) as exc_info:
            config.ensure_valid()

        assert exc_info.value.errors == ["SLACK_APP_TOKEN is required (for Socket Mode)"]

    def test_default_log_level(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        assert Config(_env_file=None).LOG_LEVEL == "DEBUG"
