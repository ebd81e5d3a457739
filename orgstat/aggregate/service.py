"""Windowed aggregation and ranking of contributor statistics."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

import orjson

from orgstat.aggregate.models import (
    AuthorRepositoryStats,
    AuthorSummary,
    AuthorWindowStats,
    RankedEntry,
    RankedWindow,
    RepositoryStats,
    WindowedTotals,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from orgstat.aggregate.models import Report, TimeWindow, WindowCutoffs
    from orgstat.models import ContributorStats, GitHubUser


LOGGER = logging.getLogger(__name__)

DEFAULT_TOP_N = 100


def summarize_repository(
    name: str,
    contributors: Iterable[ContributorStats],
    cutoffs: WindowCutoffs,
) -> RepositoryStats:
    """Collapse each contributor's weekly series into per-window sums.

    Every week counts towards all-time; it counts towards a narrower window
    only when its start lies after that window's cutoff. The windows are
    tested independently of each other.
    """
    authors: list[AuthorRepositoryStats] = []
    for contributor in contributors:
        if contributor.author is None:
            LOGGER.debug("Skipping contributor without an account in %s", name)
            continue
        totals = {window.key: WindowedTotals() for window in cutoffs.windows}
        last_week_start = None
        for week in contributor.weeks:
            started_at = week.started_at
            for window in cutoffs.windows:
                if not cutoffs.includes(window, started_at):
                    continue
                window_totals = totals[window.key]
                window_totals.commits += week.commits
                window_totals.additions += week.additions
                window_totals.deletions += week.deletions
            if last_week_start is None or started_at > last_week_start:
                last_week_start = started_at
        authors.append(
            AuthorRepositoryStats(
                author=_author_summary(contributor.author),
                totals=totals,
                week_count=len(contributor.weeks),
                last_week_start=last_week_start,
            ),
        )
    return RepositoryStats(name=name, authors=authors)


def rank_authors(entries: Iterable[AuthorWindowStats], *, limit: int = DEFAULT_TOP_N) -> list[RankedEntry]:
    """Order authors by descending commit count and keep at most ``limit`` of them."""
    ordered = sorted(entries, key=lambda entry: (-entry.totals.commits, entry.author.login))
    return [
        RankedEntry(
            rank=position,
            author=entry.author.model_copy(),
            totals=entry.totals.model_copy(),
        )
        for position, entry in enumerate(ordered[:limit], start=1)
    ]


class AggregationState:
    """Organisation-wide aggregation maps guarded by a single lock.

    One map per window, keyed by author login. Maps only grow while
    repositories are merged and are read once ranking starts.
    """

    def __init__(self, cutoffs: WindowCutoffs) -> None:
        """Create one empty aggregation map per configured window."""
        self._cutoffs = cutoffs
        self._lock = threading.Lock()
        self._maps: dict[str, dict[str, AuthorWindowStats]] = {window.key: {} for window in cutoffs.windows}
        self._merged = 0

    @property
    def merged_repositories(self) -> int:
        """Return how many repositories have been merged so far."""
        with self._lock:
            return self._merged

    def merge(self, repository: RepositoryStats) -> None:
        """Fold one repository's per-author sums into every window atomically."""
        with self._lock:
            for contribution in repository.authors:
                login = contribution.author.login
                for window in self._cutoffs.windows:
                    entries = self._maps[window.key]
                    entry = entries.get(login)
                    if entry is None:
                        entry = AuthorWindowStats(author=contribution.author.model_copy())
                        entries[login] = entry
                    entry.totals.accumulate(contribution.totals[window.key])
                    if self._counts_repository(contribution, window):
                        entry.totals.repo_count += 1
            self._merged += 1
        LOGGER.debug("Merged %s authors from %s", len(repository.authors), repository.name)

    def entries(self, window_key: str) -> list[AuthorWindowStats]:
        """Return a copy of the aggregation map for one window."""
        with self._lock:
            return [entry.model_copy(deep=True) for entry in self._maps[window_key].values()]

    def rank(self, *, limit: int = DEFAULT_TOP_N) -> list[RankedWindow]:
        """Build the ranked list of every window in report order."""
        return [
            RankedWindow(
                key=window.key,
                title=window.title,
                entries=rank_authors(self.entries(window.key), limit=limit),
            )
            for window in self._cutoffs.windows
        ]

    def _counts_repository(self, contribution: AuthorRepositoryStats, window: TimeWindow) -> bool:
        # All-time has no cutoff, so any weekly data counts the repository.
        if contribution.week_count == 0 or contribution.last_week_start is None:
            return False
        return self._cutoffs.includes(window, contribution.last_week_start)


def write_report(report: Report, output_path: Path) -> None:
    """Persist the ranked report as indented JSON."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = report.model_dump(mode="json")
    output_path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))


def _author_summary(user: GitHubUser) -> AuthorSummary:
    return AuthorSummary(
        id=user.id,
        login=user.login,
        avatar_url=str(user.avatar_url) if user.avatar_url else None,
    )
