"""Starline testing utilities.

Provides a fake stargazers API and recording cache for testing code that
uses Starline.
"""

from starline.testing.fixtures import build_client
from starline.testing.mock import FakeStargazersAPI, MockCall, RecordingCache

__all__ = [
    "FakeStargazersAPI",
    "MockCall",
    "RecordingCache",
    "build_client",
]
