"""
Shared fixtures for the connkit test suite.
"""

from unittest.mock import MagicMock

import pytest

from connkit.models import BackendFamily, ConnectionEndpoint, RelationalDescriptor


@pytest.fixture
def primary_endpoint():
    """Endpoint used by the plain primary scenario."""
    return ConnectionEndpoint(host="db1", port="5432", username="app", password="s3cret")


@pytest.fixture
def postgres_descriptor(primary_endpoint):
    """PostgreSQL descriptor with no replicas, preset or timeouts."""
    return RelationalDescriptor(
        family=BackendFamily.POSTGRES,
        primary=primary_endpoint,
        database="orders",
    )


@pytest.fixture
def replicated_descriptor(primary_endpoint):
    """PostgreSQL descriptor with two valid replicas."""
    return RelationalDescriptor(
        family=BackendFamily.POSTGRES,
        primary=primary_endpoint,
        replicas=(
            ConnectionEndpoint(host="db2", port="5432", username="app", password="s3cret"),
            ConnectionEndpoint(host="db3", port="5433", username="app", password="s3cret"),
        ),
        database="orders",
    )


@pytest.fixture
def make_engine():
    """Factory for mock engines that look like SQLAlchemy engines."""
    def _make(name="engine"):
        engine = MagicMock(name=name)
        engine.pool.size.return_value = 5
        engine.pool.checkedin.return_value = 4
        engine.pool.checkedout.return_value = 1
        engine.pool.overflow.return_value = 0
        return engine
    return _make
