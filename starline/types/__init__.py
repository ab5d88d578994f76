"""Starline type definitions.

This module exports all data model types used by the package.
"""

from starline.types.series import Bucket, Granularity, StarHistory
from starline.types.stars import PAGE_SIZE, FetchStats, Page, StarsResult

__all__ = [
    # Fetch types
    "PAGE_SIZE",
    "Page",
    "FetchStats",
    "StarsResult",
    # Series types
    "Granularity",
    "Bucket",
    "StarHistory",
]
