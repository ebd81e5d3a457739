"""Models representing windowed aggregation and ranked report structures."""

from __future__ import annotations

from datetime import datetime, timedelta

import pendulum
from pydantic import BaseModel, ConfigDict, Field


class TimeWindow(BaseModel):
    """A retrospective period over which contributions are summed."""

    model_config = ConfigDict(frozen=True)

    key: str
    title: str
    delta: timedelta | None = Field(
        default=None,
        description="Timedelta representing the length of the window. None indicates all-time.",
    )

    def includes(self, timestamp: datetime, *, reference: datetime) -> bool:
        """Return True when the timestamp falls strictly after the window's cutoff."""
        if self.delta is None:
            return True
        return timestamp > reference - self.delta


def build_windows() -> tuple[TimeWindow, ...]:
    """Return canonical aggregation windows in report order."""
    return (
        TimeWindow(key="all", title="Totals", delta=None),
        TimeWindow(key="year", title="Last year", delta=timedelta(hours=8760)),
        TimeWindow(key="month", title="Last month", delta=timedelta(hours=720)),
        TimeWindow(key="week", title="Last week", delta=timedelta(hours=168)),
    )


class WindowCutoffs(BaseModel):
    """Reference instant and windows fixed for the whole run."""

    model_config = ConfigDict(frozen=True)

    reference: datetime
    windows: tuple[TimeWindow, ...] = Field(default_factory=build_windows)

    @classmethod
    def capture(cls, reference: datetime | None = None) -> WindowCutoffs:
        """Freeze the cutoffs relative to ``reference``, defaulting to now."""
        return cls(reference=reference or pendulum.now("UTC"))

    def includes(self, window: TimeWindow, timestamp: datetime) -> bool:
        """Return True when the timestamp counts towards the window."""
        return window.includes(timestamp, reference=self.reference)


class WindowedTotals(BaseModel):
    """Commit, line and repository counts for one author within one window."""

    commits: int = 0
    additions: int = 0
    deletions: int = 0
    repo_count: int = 0

    def accumulate(self, other: WindowedTotals) -> None:
        """Add another instance's commit and line counts in place."""
        self.commits += other.commits
        self.additions += other.additions
        self.deletions += other.deletions


class AuthorSummary(BaseModel):
    """Trimmed author details retained for reporting."""

    id: int
    login: str
    avatar_url: str | None = None


class AuthorRepositoryStats(BaseModel):
    """One author's windowed sums for a single repository."""

    author: AuthorSummary
    totals: dict[str, WindowedTotals]
    week_count: int = 0
    last_week_start: datetime | None = None


def _empty_author_stats() -> list[AuthorRepositoryStats]:
    return []


class RepositoryStats(BaseModel):
    """Per-author windowed sums collected from one repository."""

    name: str
    authors: list[AuthorRepositoryStats] = Field(default_factory=_empty_author_stats)


class AuthorWindowStats(BaseModel):
    """Organisation-wide totals for an author inside one aggregation map."""

    author: AuthorSummary
    totals: WindowedTotals = Field(default_factory=WindowedTotals)


class RankedEntry(BaseModel):
    """An author's position in a ranked window."""

    rank: int
    author: AuthorSummary
    totals: WindowedTotals


class RankedWindow(BaseModel):
    """Authors of one window ordered by descending commit count."""

    key: str
    title: str
    entries: list[RankedEntry]


def _empty_names() -> list[str]:
    return []


class Report(BaseModel):
    """Top-level ranked report handed to the renderer."""

    organization: str
    generated_at: datetime
    repositories: int
    failed_repositories: list[str] = Field(default_factory=_empty_names)
    windows: list[RankedWindow]
