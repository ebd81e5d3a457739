"""Repository fetchers for GitHub organisations."""

import math
from urllib.parse import quote
from typing import TYPE_CHECKING

from orgstat.fetchers.organizations import fetch_organization
from orgstat.models import Repository

if TYPE_CHECKING:
    from orgstat.github_client import GitHubClient


async def fetch_organization_repositories(
    client: "GitHubClient",
    organization: str,
) -> list[Repository]:
    """Return every public and private repository of an organisation visible to the client."""
    details = await fetch_organization(client, organization)
    pages = max(1, math.ceil(details.repository_count / client.per_page))
    encoded = quote(organization, safe="")
    return [
        Repository.model_validate(payload)
        async for payload in client.paginate(
            "GET",
            f"/orgs/{encoded}/repos",
            params={"type": "all"},
            pages=pages,
        )
    ]
