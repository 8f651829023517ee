"""Pytest fixtures for Slack approval gate tests."""

import os

import pytest
from slack_sdk.web.async_client import AsyncWebClient

from slack_approval.config import Config, RunMetadata


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run live integration tests that require Slack credentials",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "live: marks tests as live integration tests (require Slack credentials)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --live flag is passed."""
    if config.getoption("--live"):
        return

    skip_live = pytest.mark.skip(reason="Need --live option to run live tests")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def run_metadata() -> RunMetadata:
    return RunMetadata(
        server_url="https://github.com",
        repository="org/repo",
        run_id="42",
        workflow="CI",
        runner_os="Linux",
        actor="alice",
    )


@pytest.fixture
def gate_config(tmp_path) -> Config:
    """A complete configuration that ignores the surrounding environment."""
    return Config(
        _env_file=None,
        SLACK_BOT_TOKEN="xoxb-test",
        SLACK_SIGNING_SECRET="secret",
        SLACK_APP_TOKEN="xapp-test",
        SLACK_CHANNEL_ID="C123",
        INPUT_BLOCKS="",
        GITHUB_SERVER_URL="https://github.com",
        GITHUB_REPOSITORY="org/repo",
        GITHUB_RUN_ID="42",
        GITHUB_WORKFLOW="CI",
        RUNNER_OS="Linux",
        GITHUB_ACTOR="alice",
        GITHUB_OUTPUT=str(tmp_path / "github_output"),
    )


@pytest.fixture
def slack_bot_token() -> str:
    """Get Slack bot token from environment."""
    token = os.environ.get("SLACK_BOT_TOKEN", "")
    if not token:
        pytest.skip("SLACK_BOT_TOKEN environment variable not set")
    return token


@pytest.fixture
def slack_test_channel() -> str:
    """Get test channel ID from environment."""
    channel = os.environ.get("SLACK_TEST_CHANNEL", "")
    if not channel:
        pytest.skip("SLACK_TEST_CHANNEL environment variable not set")
    return channel


@pytest.fixture
def slack_client(slack_bot_token: str) -> AsyncWebClient:
    """Create an async Slack WebClient for live tests."""
    return AsyncWebClient(token=slack_bot_token)
