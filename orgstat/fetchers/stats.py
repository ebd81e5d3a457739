"""Contributor statistics fetchers for GitHub repositories."""

from typing import TYPE_CHECKING, Any, cast
from urllib.parse import quote

from orgstat.aggregate.service import summarize_repository
from orgstat.github_client import GitHubAPIError, StatsPendingError
from orgstat.models import ContributorStats

if TYPE_CHECKING:
    from orgstat.aggregate.models import RepositoryStats, WindowCutoffs
    from orgstat.github_client import GitHubClient

_ACCEPTED_STATUS = 202
_NO_CONTENT_STATUS = 204


async def fetch_contributor_stats(
    client: "GitHubClient",
    organization: str,
    repository: str,
) -> list[ContributorStats]:
    """Return the weekly commit series of every contributor to a repository."""
    path = f"/repos/{quote(organization, safe='')}/{quote(repository, safe='')}/stats/contributors"
    response = await client.request("GET", path)
    if response.status_code == _ACCEPTED_STATUS:
        message = f"Statistics for {organization}/{repository} are still being computed"
        raise StatsPendingError(message, status_code=response.status_code)
    if response.status_code == _NO_CONTENT_STATUS:
        return []
    payload = client.parse_json(response)
    if not isinstance(payload, list):
        message = f"Unexpected contributor statistics payload for {organization}/{repository}"
        raise GitHubAPIError(message, status_code=response.status_code)
    return [ContributorStats.model_validate(item) for item in cast("list[dict[str, Any]]", payload)]


async def fetch_repository_stats(
    client: "GitHubClient",
    organization: str,
    repository: str,
    cutoffs: "WindowCutoffs",
) -> "RepositoryStats":
    """Fetch a repository's contributor series and collapse them into windowed sums."""
    contributors = await fetch_contributor_stats(client, organization, repository)
    return summarize_repository(repository, contributors, cutoffs)
