"""Pytest configuration and fixtures."""

import pytest
from cosmos_helper import FakeContainer, Movie

from cosmos_datasync.config.repository_options import CosmosRepositoryOptions
from cosmos_datasync.repositories.table_repository import CosmosTableRepository


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests that need a Cosmos DB account or emulator"
    )


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio."""
    return "asyncio"


@pytest.fixture
def container() -> FakeContainer:
    """Container partitioned on /rating."""
    return FakeContainer(["/rating"])


@pytest.fixture
def repository(container: FakeContainer) -> CosmosTableRepository[Movie]:
    """Repository for movies partitioned by rating."""
    options = CosmosRepositoryOptions(partition_key_property_names=["rating"])
    return CosmosTableRepository(container, Movie, options)


@pytest.fixture
def id_container() -> FakeContainer:
    """Container partitioned on /id."""
    return FakeContainer()


@pytest.fixture
def id_repository(id_container: FakeContainer) -> CosmosTableRepository[Movie]:
    """Repository with default partitioning on id."""
    return CosmosTableRepository(id_container, Movie)
