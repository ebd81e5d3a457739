"""Organisation-level fetchers for GitHub."""

from urllib.parse import quote
from typing import TYPE_CHECKING

from orgstat.models import Organization

if TYPE_CHECKING:
    from orgstat.github_client import GitHubClient


async def fetch_organization(client: "GitHubClient", organization: str) -> Organization:
    """Fetch metadata about a GitHub organisation, including its repository counts."""
    encoded = quote(organization, safe="")
    response = await client.request("GET", f"/orgs/{encoded}")
    payload = client.parse_json(response)
    return Organization.model_validate(payload)
