from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

from slack_approval.errors import ConfigurationError


class RunMetadata(BaseModel):
    """Metadata describing the pipeline run awaiting approval."""

    server_url: str = ""
    repository: str = ""
    run_id: str = ""
    workflow: str = ""
    runner_os: str = ""
    actor: str = ""

    @property
    def repository_url(self) -> str:
        return f"{self.server_url}/{self.repository}"

    @property
    def actions_url(self) -> str:
        """Link to the run page, e.g. https://github.com/org/repo/actions/runs/42."""
        return f"{self.server_url}/{self.repository}/actions/runs/{self.run_id}"


class Config(BaseSettings):
    """
    Gate configuration loaded from the environment.

    Priority (highest to lowest):
    1. Init arguments
    2. Environment variables
    3. .env file
    4. Default values
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Slack configuration
    SLACK_BOT_TOKEN: str = ""
    SLACK_SIGNING_SECRET: str = ""
    SLACK_APP_TOKEN: str = ""
    SLACK_CHANNEL_ID: str = ""

    # The `blocks` action input, exported by the runner as INPUT_BLOCKS
    INPUT_BLOCKS: str = ""

    # Run metadata provided by the GitHub Actions runner
    GITHUB_SERVER_URL: str = ""
    GITHUB_REPOSITORY: str = ""
    GITHUB_RUN_ID: str = ""
    GITHUB_WORKFLOW: str = ""
    RUNNER_OS: str = ""
    GITHUB_ACTOR: str = ""

    # Step output file, set by the runner
    GITHUB_OUTPUT: str = ""

    LOG_LEVEL: str = "DEBUG"

    @property
    def run_metadata(self) -> RunMetadata:
        return RunMetadata(
            server_url=self.GITHUB_SERVER_URL,
            repository=self.GITHUB_REPOSITORY,
            run_id=self.GITHUB_RUN_ID,
            workflow=self.GITHUB_WORKFLOW,
            runner_os=self.RUNNER_OS,
            actor=self.GITHUB_ACTOR,
        )

    def validate_required(self) -> list[str]:
        """Validate required configuration."""
        errors = []
        if not self.SLACK_BOT_TOKEN:
            errors.append("SLACK_BOT_TOKEN is required")
        if not self.SLACK_SIGNING_SECRET:
            errors.append("SLACK_SIGNING_SECRET is required")
        if not self.SLACK_APP_TOKEN:
            errors.append("SLACK_APP_TOKEN is required (for Socket Mode)")
        if not self.SLACK_CHANNEL_ID:
            errors.append("SLACK_CHANNEL_ID is required")
        return errors

    def ensure_valid(self) -> None:
        """Raise ConfigurationError listing every missing setting."""
        errors = self.validate_required()
        if errors:
            raise ConfigurationError(errors)
