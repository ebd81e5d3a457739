"""Data collection orchestration for organisation contributor statistics."""

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from pydantic import ValidationError

from orgstat.aggregate.models import Report, WindowCutoffs
from orgstat.aggregate.service import AggregationState
from orgstat.errors import RepositoryListError
from orgstat.fetchers import repositories, stats
from orgstat.github_client import GitHubAPIError, GitHubClient

if TYPE_CHECKING:
    from orgstat.config import AppSettings

LOGGER = logging.getLogger(__name__)


class ContributorStatsCollector:
    """Fetch contributor statistics for every repository of an organisation and rank authors."""

    def __init__(
        self,
        settings: "AppSettings",
        *,
        client_factory: Callable[["AppSettings"], GitHubClient] | None = None,
        cutoffs: WindowCutoffs | None = None,
    ) -> None:
        """Initialize the collector with runtime settings and frozen window cutoffs."""
        self._settings = settings
        self._semaphore = asyncio.Semaphore(settings.max_concurrency)
        self._client_factory: Callable[[AppSettings], GitHubClient]
        self._client_factory = client_factory or GitHubClient
        self._cutoffs = cutoffs or WindowCutoffs.capture()
        self._state = AggregationState(self._cutoffs)
        self._failed: list[str] = []

    async def run(self) -> Report:
        """Execute the collection workflow, returning the ranked report."""
        organization = self._settings.organization
        async with self._client_factory(self._settings) as client:
            try:
                repository_list = await repositories.fetch_organization_repositories(client, organization)
            except (GitHubAPIError, ValidationError) as exc:
                LOGGER.error("Failed to list repositories for %s: %s", organization, exc)
                raise RepositoryListError(organization, exc) from exc
            LOGGER.info("Discovered %s repositories in %s", len(repository_list), organization)
            names = [repository.name for repository in repository_list]
            await asyncio.gather(
                *(
                    self._collect_repository(client, name, index=index, total=len(names))
                    for index, name in enumerate(names, start=1)
                ),
            )
        LOGGER.info(
            "Aggregated %s of %s repositories (%s unavailable)",
            self._state.merged_repositories,
            len(names),
            len(self._failed),
        )
        return Report(
            organization=organization,
            generated_at=self._cutoffs.reference,
            repositories=len(names),
            failed_repositories=sorted(self._failed),
            windows=self._state.rank(limit=self._settings.top_n),
        )

    async def _collect_repository(
        self,
        client: GitHubClient,
        name: str,
        *,
        index: int,
        total: int,
    ) -> None:
        async with self._semaphore:
            LOGGER.info("%s/%s %s", index, total, name)
            try:
                repository_stats = await stats.fetch_repository_stats(
                    client,
                    self._settings.organization,
                    name,
                    self._cutoffs,
                )
            except (GitHubAPIError, ValidationError) as exc:
                LOGGER.warning("Could not get stats for %s: %s", name, exc)
                self._failed.append(name)
                return
        self._state.merge(repository_stats)
