"""Test utilities for perch applications.

::

    from perch.testing import TestClient, assert_redirect
"""

from perch.testing.assertions import assert_body, assert_redirect
from perch.testing.client import TestClient

__all__ = [
    "TestClient",
    "assert_body",
    "assert_redirect",
]
