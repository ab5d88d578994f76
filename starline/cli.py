"""
Command-line entry point for star history reports.
"""

import asyncio
import json
import logging

import click

from starline.cache import NullCache
from starline.client import AsyncStarlineClient
from starline.exceptions import (
    ConfigurationError,
    InvalidGranularityError,
    InvalidRepositoryError,
    StarlineError,
)
from starline.logging import configure_logging, get_logger
from starline.types.series import Granularity, StarHistory

logger = get_logger()


def _build_client(
    token: str | None, concurrency: int | None, no_cache: bool
) -> AsyncStarlineClient:
    overrides: dict = {"token": token}
    if concurrency is not None:
        overrides["concurrency"] = concurrency
    if no_cache:
        overrides["cache"] = NullCache()
    return AsyncStarlineClient.from_env(**overrides)


async def _run(
    repo: str,
    group: str,
    token: str | None,
    concurrency: int | None,
    no_cache: bool,
) -> StarHistory:
    async with _build_client(token, concurrency, no_cache) as client:
        return await client.get_star_time_series(repo, group)


def format_table(history: StarHistory) -> str:
    """Render a history as a plain-text table followed by the fetch log."""
    lines = [
        f"GitHub Stars - {history.repo}",
        f"Total Stars: {history.total_stars}",
        "",
        f"{'date':<12}{'new stars per ' + history.granularity.value:>22}{'cumulative':>14}",
    ]
    for bucket, total in zip(history.buckets, history.cumulative()):
        lines.append(f"{bucket.date:<12}{bucket.count:>22}{total:>14}")
    if not history.buckets:
        lines.append("(no complete buckets yet)")
    lines.append("")
    lines.append("Log")
    lines.extend(history.stats.log)
    return "\n".join(lines)


@click.command()
@click.argument("repo")
@click.option(
    "--group",
    type=click.Choice([g.value for g in Granularity]),
    default=Granularity.DAY.value,
    help="Bucket width",
    show_default=True,
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
    show_default=True,
)
@click.option(
    "--concurrency",
    type=int,
    help="Concurrent page requests (default: STARLINE_CONCURRENCY or 20)",
)
@click.option(
    "--no-cache",
    is_flag=True,
    help="Do not read or write cached pages",
)
@click.option(
    "--token",
    envvar="GITHUB_TOKEN",
    help="GitHub token (or set GITHUB_TOKEN env var)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Log page requests and cache activity to stderr",
)
def main(
    repo: str,
    group: str,
    output_format: str,
    concurrency: int | None,
    no_cache: bool,
    token: str | None,
    verbose: bool,
) -> None:
    """
    Show how a repository's GitHub stars accumulated over time.

    REPO is the repository in owner/name form.

    Examples:

        starline pydantic/pydantic-ai --group week

        starline pydantic/pydantic-ai --format json > stars.json
    """
    if verbose:
        configure_logging(level=logging.INFO, http_level=logging.DEBUG, cache_level=logging.DEBUG)

    try:
        history = asyncio.run(_run(repo, group, token, concurrency, no_cache))
    except (ConfigurationError, InvalidRepositoryError, InvalidGranularityError) as e:
        raise click.UsageError(e.message) from e
    except StarlineError as e:
        logger.error("Star history for %s failed: %s", repo, e)
        click.echo(f"Error: {e.message}", err=True)
        raise click.Abort() from e

    if output_format == "json":
        click.echo(json.dumps(history.to_dict(), indent=2))
    else:
        click.echo(format_table(history))


if __name__ == "__main__":
    main()
