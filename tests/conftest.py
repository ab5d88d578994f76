"""Shared fixtures for the Starline test suite."""

from starline.testing.fixtures import fake_api, make_client, memory_cache  # noqa: F401
