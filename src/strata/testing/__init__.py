"""Test utilities for strata applications.

Provides an in-process ASGI test client::

    from strata.testing import TestClient
"""

from strata.testing.client import TestClient, TestResponse

__all__ = [
    "TestClient",
    "TestResponse",
]
