#!/usr/bin/env python3
"""
Starline usage example.

Fetches the star history of a repository and prints a weekly series.
Run with: python examples/star_history.py pydantic/pydantic-ai
Set GITHUB_TOKEN to avoid the unauthenticated rate limit.
"""

import asyncio
import logging
import sys

from starline import AsyncStarlineClient, StarlineError, configure_logging

configure_logging(level=logging.INFO)


async def main(repo: str) -> int:
    async with AsyncStarlineClient.from_env() as client:
        try:
            history = await client.get_star_time_series(repo, "week")
        except StarlineError as e:
            print(f"Failed: {e}")
            print(f"Code: {e.code}")
            return 1

    print(f"\n{repo}: {history.total_stars} stars")
    for bucket, total in zip(history.buckets, history.cumulative()):
        print(f"  {bucket.date}  +{bucket.count:<6} {total}")

    stats = history.stats
    print(f"\npages cached {stats.cached_pages}, pages downloaded {stats.downloaded_pages}")
    if stats.hit_pagination_limit:
        print("GitHub stopped paging early; older stars only are shown")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "pydantic/pydantic-ai")))
