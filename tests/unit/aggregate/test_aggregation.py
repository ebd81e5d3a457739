"""Tests for windowed aggregation and ranking."""

import pendulum
import pytest

from orgstat.aggregate.models import WindowCutoffs, WindowedTotals
from orgstat.aggregate.service import AggregationState, rank_authors, summarize_repository
from tests.factories import (
    REFERENCE,
    build_contributor,
    build_cutoffs,
    build_repository_stats,
    build_window_entry,
    week_payload,
)

WINDOW_KEYS = ("all", "year", "month", "week")


def _totals_by_window(state: AggregationState, login: str) -> dict[str, WindowedTotals]:
    return {
        key: next(entry.totals for entry in state.entries(key) if entry.author.login == login)
        for key in WINDOW_KEYS
    }


def test_recent_week_counts_towards_every_window() -> None:
    """A week three days old should contribute to all four windows and count the repository once."""
    cutoffs = build_cutoffs()
    contributor = build_contributor(
        "alice",
        [week_payload(REFERENCE.subtract(days=3), commits=5, additions=100, deletions=20)],
    )
    state = AggregationState(cutoffs)

    state.merge(summarize_repository("lib", [contributor], cutoffs))

    for key, totals in _totals_by_window(state, "alice").items():
        assert totals == WindowedTotals(commits=5, additions=100, deletions=20, repo_count=1), key


def test_old_week_counts_towards_all_time_only() -> None:
    """A week two years old should only contribute to all-time totals."""
    cutoffs = build_cutoffs()
    contributor = build_contributor(
        "alice",
        [week_payload(REFERENCE.subtract(years=2), commits=7, additions=70, deletions=3)],
    )
    state = AggregationState(cutoffs)

    state.merge(summarize_repository("lib", [contributor], cutoffs))

    totals = _totals_by_window(state, "alice")
    assert totals["all"] == WindowedTotals(commits=7, additions=70, deletions=3, repo_count=1)
    for key in ("year", "month", "week"):
        assert totals[key] == WindowedTotals(), key


def test_windows_are_tested_independently() -> None:
    """Each week should be assigned to every window whose cutoff it passes."""
    cutoffs = build_cutoffs()
    contributor = build_contributor(
        "bob",
        [
            week_payload(REFERENCE.subtract(years=3), commits=1),
            week_payload(REFERENCE.subtract(days=200), commits=2),
            week_payload(REFERENCE.subtract(days=20), commits=4),
            week_payload(REFERENCE.subtract(days=2), commits=8),
        ],
    )

    summary = summarize_repository("lib", [contributor], cutoffs)

    totals = summary.authors[0].totals
    assert totals["all"].commits == 15
    assert totals["year"].commits == 14
    assert totals["month"].commits == 12
    assert totals["week"].commits == 8
    assert summary.authors[0].week_count == 4
    assert summary.authors[0].last_week_start == REFERENCE.subtract(days=2)


def test_week_on_cutoff_is_excluded() -> None:
    """A week starting exactly at a cutoff is not after it."""
    cutoffs = build_cutoffs()
    contributor = build_contributor("carol", [week_payload(REFERENCE.subtract(hours=168), commits=3)])

    totals = summarize_repository("lib", [contributor], cutoffs).authors[0].totals

    assert totals["week"].commits == 0
    assert totals["month"].commits == 3


def test_narrow_windows_never_exceed_all_time() -> None:
    """Commit, addition and deletion sums of narrower windows are bounded by all-time."""
    cutoffs = build_cutoffs()
    weeks = [
        week_payload(REFERENCE.subtract(days=offset), commits=offset % 5, additions=offset, deletions=offset // 2)
        for offset in range(1, 800, 9)
    ]
    state = AggregationState(cutoffs)
    state.merge(summarize_repository("lib", [build_contributor("dave", weeks)], cutoffs))

    totals = _totals_by_window(state, "dave")
    for key in ("year", "month", "week"):
        assert totals[key].commits <= totals["all"].commits
        assert totals[key].additions <= totals["all"].additions
        assert totals[key].deletions <= totals["all"].deletions


def test_contributors_without_account_are_skipped() -> None:
    """Entries with a null author should not reach the aggregation."""
    cutoffs = build_cutoffs()
    ghost = build_contributor("ghost", [week_payload(REFERENCE.subtract(days=1), commits=1)])
    ghost = ghost.model_copy(update={"author": None})

    summary = summarize_repository("lib", [ghost], cutoffs)

    assert summary.authors == []


def test_repo_count_uses_most_recent_week_for_narrow_windows() -> None:
    """Narrow windows count the repository only when the latest week is inside them."""
    cutoffs = build_cutoffs()
    stale = build_contributor(
        "erin",
        [
            week_payload(REFERENCE.subtract(days=200), commits=1),
            week_payload(REFERENCE.subtract(days=60), commits=2),
        ],
    )
    state = AggregationState(cutoffs)

    state.merge(summarize_repository("lib", [stale], cutoffs))

    totals = _totals_by_window(state, "erin")
    assert totals["all"] == WindowedTotals(commits=3, repo_count=1)
    assert totals["year"] == WindowedTotals(commits=3, repo_count=1)
    assert totals["month"] == WindowedTotals()
    assert totals["week"] == WindowedTotals()


def test_all_time_repo_count_requires_weekly_data() -> None:
    """An author with an empty series is registered but no repository is counted."""
    cutoffs = build_cutoffs()
    state = AggregationState(cutoffs)

    state.merge(summarize_repository("lib", [build_contributor("frank", [])], cutoffs))

    for key, totals in _totals_by_window(state, "frank").items():
        assert totals == WindowedTotals(), key


def test_merge_is_commutative() -> None:
    """Merging R1 then R2 yields the same aggregate as R2 then R1."""
    cutoffs = build_cutoffs()
    first = build_repository_stats("r1", {"alice": 3, "bob": 1}, cutoffs=cutoffs)
    second = build_repository_stats(
        "r2",
        {"alice": 4, "carol": 9},
        cutoffs=cutoffs,
        last_week_start=REFERENCE.subtract(days=40),
    )

    forward = AggregationState(cutoffs)
    forward.merge(first)
    forward.merge(second)
    backward = AggregationState(cutoffs)
    backward.merge(second)
    backward.merge(first)

    for key in WINDOW_KEYS:
        forward_entries = {entry.author.login: entry for entry in forward.entries(key)}
        backward_entries = {entry.author.login: entry for entry in backward.entries(key)}
        assert forward_entries == backward_entries
    assert forward.merged_repositories == backward.merged_repositories == 2


def test_repo_count_bounded_by_contributed_repositories() -> None:
    """No window counts more repositories than the author contributed to."""
    cutoffs = build_cutoffs()
    state = AggregationState(cutoffs)
    for index in range(5):
        state.merge(build_repository_stats(f"repo-{index}", {"alice": index + 1}, cutoffs=cutoffs))
    state.merge(build_repository_stats("other", {"bob": 2}, cutoffs=cutoffs))

    for key in WINDOW_KEYS:
        alice = next(entry for entry in state.entries(key) if entry.author.login == "alice")
        assert alice.totals.repo_count <= 5
        assert alice.totals.commits == 15


def test_ranking_places_lower_counts_after_ties() -> None:
    """Authors tied on commits both precede an author with fewer commits."""
    ranked = rank_authors(
        [build_window_entry("c", 10), build_window_entry("a", 50), build_window_entry("b", 50)],
    )

    assert [entry.rank for entry in ranked] == [1, 2, 3]
    assert {entry.author.login for entry in ranked[:2]} == {"a", "b"}
    assert ranked[2].author.login == "c"


@pytest.mark.parametrize(("authors", "expected"), [(3, 3), (100, 100), (150, 100), (0, 0)])
def test_ranking_truncates_without_padding(authors: int, expected: int) -> None:
    """Ranked windows hold at most 100 entries and never pad small maps."""
    entries = [build_window_entry(f"user-{index:03d}", index) for index in range(authors)]

    ranked = rank_authors(entries)

    assert len(ranked) == expected
    if authors:
        assert [entry.totals.commits for entry in ranked] == sorted(range(authors), reverse=True)[:expected]


def test_state_rank_returns_windows_in_report_order() -> None:
    """AggregationState.rank should rank every window with the configured limit."""
    cutoffs = build_cutoffs()
    state = AggregationState(cutoffs)
    state.merge(build_repository_stats("lib", {"alice": 3, "bob": 5, "carol": 1}, cutoffs=cutoffs))

    windows = state.rank(limit=2)

    assert [window.key for window in windows] == list(WINDOW_KEYS)
    assert [window.title for window in windows] == ["Totals", "Last year", "Last month", "Last week"]
    for window in windows:
        assert [entry.author.login for entry in window.entries] == ["bob", "alice"]


def test_cutoffs_capture_defaults_to_now() -> None:
    """Cutoffs captured without a reference should be anchored at the current time."""
    before = pendulum.now("UTC")

    captured = WindowCutoffs.capture()

    assert before <= captured.reference <= pendulum.now("UTC")
