"""Pydantic models describing GitHub payloads used by the collector."""

from datetime import datetime

import pendulum
from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class GitHubUser(BaseModel):
    """Subset of GitHub account metadata used to identify authors."""

    id: int
    login: str
    avatar_url: HttpUrl | None = None


class Organization(BaseModel):
    """Organisation details used to size the repository listing."""

    login: str
    public_repos: int = 0
    total_private_repos: int = 0

    @property
    def repository_count(self) -> int:
        """Return the number of repositories visible to the credential."""
        return self.public_repos + self.total_private_repos


def _empty_topics() -> list[str]:
    return []


class Repository(BaseModel):
    """Repository metadata returned from the organisation listing endpoint."""

    name: str
    archived: bool = False
    language: str | None = None
    pushed_at: datetime | None = None
    topics: list[str] = Field(default_factory=_empty_topics)


class WeeklyStat(BaseModel):
    """One week of an author's activity in a repository."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    week_start: int = Field(alias="w")
    additions: int = Field(default=0, alias="a")
    deletions: int = Field(default=0, alias="d")
    commits: int = Field(default=0, alias="c")

    @property
    def started_at(self) -> datetime:
        """Return the start of the week as an aware UTC datetime."""
        return pendulum.from_timestamp(self.week_start)


def _empty_weeks() -> list[WeeklyStat]:
    return []


class ContributorStats(BaseModel):
    """Weekly series for one author returned by the contributor statistics endpoint."""

    author: GitHubUser | None = None
    total: int = 0
    weeks: list[WeeklyStat] = Field(default_factory=_empty_weeks)
