"""Command-line entry point for the orgstat tool."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from orgstat.aggregate.service import write_report
from orgstat.collector import ContributorStatsCollector
from orgstat.config import AppSettings, load_settings
from orgstat.errors import ConfigError, RenderError, RepositoryListError
from orgstat.github_client import GitHubAPIError, GitHubClient
from orgstat.render.service import STDOUT_DESTINATION, RenderService

app = typer.Typer(add_completion=False, help="GitHub organisation contributor statistics.")

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s - %(message)s")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable verbose logging output.")] = False,
) -> None:
    """Configure logging before executing a sub-command."""
    _configure_logging(verbose)


@app.command()
def report(
    ctx: typer.Context,
    org: Annotated[str | None, typer.Option("--org", help="GitHub organisation name.")] = None,
    user: Annotated[str | None, typer.Option("--user", help="GitHub user.")] = None,
    token: Annotated[str | None, typer.Option("--token", help="GitHub access token.")] = None,
    out: Annotated[str | None, typer.Option("--out", help="Output file; - for stdout.")] = None,
    json_out: Annotated[
        Path | None,
        typer.Option("--json-out", help="Also write the ranked report as JSON to this path."),
    ] = None,
    concurrency: Annotated[
        int | None,
        typer.Option("--concurrency", help="Maximum number of repositories fetched at once."),
    ] = None,
) -> None:
    """Rank an organisation's contributors and write an HTML report."""
    try:
        settings = load_settings(
            organization=org,
            user=user,
            token=token,
            output=out,
            json_output=json_out,
            max_concurrency=concurrency,
        )
    except ConfigError as exc:
        typer.echo(ctx.get_usage(), err=True)
        _handle_settings_error(exc)

    collector = ContributorStatsCollector(settings)
    try:
        ranked = asyncio.run(collector.run())
    except RepositoryListError as exc:
        _handle_fatal_error("Failed to list repositories", exc)

    if ranked.failed_repositories:
        typer.secho(
            f"Statistics unavailable for {len(ranked.failed_repositories)} repositories: "
            + ", ".join(ranked.failed_repositories),
            fg=typer.colors.YELLOW,
            err=True,
        )

    try:
        if settings.json_output is not None:
            write_report(ranked, settings.json_output)
        RenderService().run(ranked, settings.output)
    except OSError as exc:
        _handle_fatal_error("Failed to write report", RenderError(str(exc)))
    except RenderError as exc:
        _handle_fatal_error("Failed to render report", exc)

    authors = len(ranked.windows[0].entries) if ranked.windows else 0
    typer.echo(
        f"Ranked {authors} authors across {ranked.repositories} repositories into {settings.output}",
        err=settings.output == STDOUT_DESTINATION,
    )


@app.command()
def doctor(
    org: Annotated[str | None, typer.Option("--org", help="GitHub organisation name.")] = None,
    user: Annotated[str | None, typer.Option("--user", help="GitHub user.")] = None,
    token: Annotated[str | None, typer.Option("--token", help="GitHub access token.")] = None,
) -> None:
    """Validate configuration and verify GitHub API connectivity."""
    try:
        settings = load_settings(organization=org, user=user, token=token, output=STDOUT_DESTINATION)
    except ConfigError as exc:
        _handle_settings_error(exc)
    typer.echo(f"Loaded configuration for organisation: {settings.organization}")
    asyncio.run(_doctor(settings))


async def _doctor(settings: AppSettings) -> None:
    try:
        async with GitHubClient(settings) as client:
            response = await client.request("GET", "/user")
            payload = client.parse_json(response)
    except GitHubAPIError as exc:
        typer.secho(f"Failed to reach GitHub API: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Authenticated as: {payload.get('login', 'unknown')}")


def _handle_settings_error(exc: ValueError) -> NoReturn:
    typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def _handle_fatal_error(context: str, exc: Exception) -> NoReturn:
    LOGGER.error("%s: %s", context, exc)
    typer.secho(f"{context}: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()
