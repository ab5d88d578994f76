"""
Pytest plugin for Starline testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["starline.testing.conftest"]
"""

# Re-export all fixtures for pytest auto-discovery
from starline.testing.fixtures import fake_api, make_client, memory_cache

__all__ = [
    "fake_api",
    "make_client",
    "memory_cache",
]
