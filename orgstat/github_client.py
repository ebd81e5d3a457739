"""Async GitHub API client with error mapping and pagination helpers."""

import logging
from types import TracebackType
from typing import Any, Self, TYPE_CHECKING, cast
from collections.abc import AsyncIterator, Mapping

import httpx

if TYPE_CHECKING:
    from orgstat.config import AppSettings

LOGGER = logging.getLogger(__name__)

_RATE_LIMIT_STATUS = 429
_FORBIDDEN_STATUS = 403
_UNEXPECTED_PAYLOAD_MESSAGE = "Unexpected response payload type"


class GitHubAPIError(RuntimeError):
    """Raised when the GitHub API cannot serve a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Attach HTTP status metadata to the exception instance."""
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(GitHubAPIError):
    """Raised when the GitHub API responds with a rate limit status."""

    def __init__(self, *, status_code: int, reset_at: int | None = None) -> None:
        """Store the epoch second at which the quota resets, when reported."""
        super().__init__("GitHub API rate limit exceeded", status_code=status_code)
        self.reset_at = reset_at


class StatsPendingError(GitHubAPIError):
    """Raised when GitHub is still computing statistics for a repository."""


class GitHubClient:
    """High-level asynchronous client for the GitHub REST API."""

    def __init__(self, settings: "AppSettings") -> None:
        """Configure the HTTP client with authentication and timeout settings."""
        self._settings = settings
        headers = {
            "User-Agent": "orgstat/0.1",
            "Accept": "application/vnd.github+json",
        }
        auth: tuple[str, str] | None = None
        token = settings.token.get_secret_value()
        if token:
            auth = (settings.user, token)
        self._client = httpx.AsyncClient(
            base_url=str(settings.github_api_base),
            headers=headers,
            auth=auth,
            timeout=httpx.Timeout(settings.request_timeout),
        )

    @property
    def per_page(self) -> int:
        """Return the page size used for paginated listings."""
        return self._settings.per_page

    async def __aenter__(self) -> Self:
        """Enter the async context manager and return the client."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Ensure the underlying HTTP client is closed when exiting the context."""
        del exc_type, exc, tb
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        """Perform a single HTTP request, mapping failures onto GitHubAPIError."""
        try:
            response = await self._client.request(method, path, params=params)
        except httpx.RequestError as exc:
            message = f"GitHub API request to {path} failed: {exc}"
            raise GitHubAPIError(message) from exc
        if _is_rate_limited(response):
            reset_at = _parse_reset(response.headers.get("X-RateLimit-Reset"))
            LOGGER.warning("Rate limit hit on %s, quota resets at %s", path, reset_at)
            raise RateLimitError(status_code=response.status_code, reset_at=reset_at)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            error_message = f"GitHub API returned {status_code}: {exc.response.text}"
            raise GitHubAPIError(error_message, status_code=status_code) from exc
        return response

    async def paginate(
        self,
        method: str,
        path: str,
        *,
        pages: int,
        params: Mapping[str, Any] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Iterate over the first ``pages`` pages of a GitHub listing, stopping early on an empty page."""
        current_params: dict[str, Any] = {"per_page": self._settings.per_page}
        if params:
            current_params.update(params)

        for page in range(1, pages + 1):
            current_params["page"] = page
            response = await self.request(method, path, params=current_params)
            payload = self.parse_json(response)
            if not isinstance(payload, list):
                raise GitHubAPIError(_UNEXPECTED_PAYLOAD_MESSAGE, status_code=response.status_code)
            items = cast("list[dict[str, Any]]", payload)
            if not items:
                break
            for item in items:
                yield item

    def parse_json(self, response: httpx.Response) -> Any:
        """Decode a JSON response or raise a GitHubAPIError on failure."""
        try:
            return response.json()
        except ValueError as exc:
            content_type = response.headers.get("Content-Type", "unknown")
            message = (
                "GitHub API returned an invalid JSON payload "
                f"(status {response.status_code}, content-type {content_type})"
            )
            raise GitHubAPIError(message, status_code=response.status_code) from exc


def _is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code == _RATE_LIMIT_STATUS:
        return True
    return response.status_code == _FORBIDDEN_STATUS and response.headers.get("X-RateLimit-Remaining") == "0"


def _parse_reset(value: str | None) -> int | None:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None
