"""Test utilities for perch gateways.

    from perch.testing import TestClient, upstream_transport
"""

from perch.testing.client import TestClient
from perch.testing.upstream import RecordedRequest, upstream_transport

__all__ = ["RecordedRequest", "TestClient", "upstream_transport"]
