"""Configuration management for the orgstat application."""

from pathlib import Path
from typing import cast

from pydantic import AnyHttpUrl, Field, SecretStr, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from orgstat.errors import ConfigError


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_prefix="ORGSTAT_",
        extra="ignore",
    )

    github_api_base: AnyHttpUrl = Field(
        default=cast("AnyHttpUrl", "https://api.github.com"),
        description="Base URL for the GitHub REST API.",
    )
    organization: str = Field(
        default="",
        description="GitHub organisation whose repositories are reported on.",
    )
    user: str = Field(
        default="",
        description="GitHub username used for basic authentication.",
    )
    token: SecretStr = Field(
        default=SecretStr(""),
        description="Personal access token paired with the username.",
    )
    output: str = Field(
        default="",
        description="Destination of the HTML report; '-' writes to standard output.",
    )
    json_output: Path | None = Field(
        default=None,
        description="Optional path receiving the ranked report as JSON.",
    )
    max_concurrency: int = Field(
        default=8,
        ge=1,
        le=32,
        description="Maximum number of repository statistics requests in flight.",
    )
    per_page: int = Field(
        default=30,
        ge=1,
        le=100,
        description="Number of repositories requested per listing page.",
    )
    top_n: int = Field(
        default=100,
        ge=1,
        description="Number of authors kept in each ranked window.",
    )
    request_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout in seconds applied to each GitHub API request.",
    )

    @model_validator(mode="after")
    def _enforce_required_fields(self) -> "AppSettings":
        missing = [
            f"ORGSTAT_{name.upper()} (--{flag}) must be configured"
            for name, flag, value in (
                ("organization", "org", self.organization),
                ("user", "user", self.user),
                ("token", "token", self.token.get_secret_value()),
                ("output", "out", self.output),
            )
            if not value
        ]
        if missing:
            raise ValueError("; ".join(missing))
        return self


def load_settings(**overrides: object) -> AppSettings:
    """Load application settings, letting non-empty overrides win over the environment."""
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return AppSettings(**values)
    except ValidationError as exc:
        details = "; ".join(str(error["msg"]).removeprefix("Value error, ") for error in exc.errors())
        raise ConfigError(details) from exc
