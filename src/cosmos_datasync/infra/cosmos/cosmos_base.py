"""Connection helpers for the async Cosmos DB client."""

import logging
from collections.abc import Sequence

from azure.cosmos import PartitionKey
from azure.cosmos.aio import ContainerProxy, CosmosClient, DatabaseProxy
from azure.identity.aio import DefaultAzureCredential

from cosmos_datasync.config.cosmos_config import CosmosConfig

logger = logging.getLogger(__name__)

EMULATOR_THROUGHPUT = 400


def create_cosmos_client(config: CosmosConfig) -> CosmosClient:
    """Create an async Cosmos client.

    Args:
        config: Cosmos configuration

    Returns:
        Client authenticated with the account key, or with managed identity
        when no key is configured or ``use_managed_identity`` is set
    """
    if not config.azure_cosmosdb_endpoint:
        raise ValueError("AZURE_COSMOSDB_ENDPOINT is required")

    if config.azure_cosmosdb_key and not config.use_managed_identity:
        # Use key-based authentication
        return CosmosClient(url=config.azure_cosmosdb_endpoint, credential=config.azure_cosmosdb_key)

    # Use managed identity
    credential = DefaultAzureCredential()
    return CosmosClient(url=config.azure_cosmosdb_endpoint, credential=credential)


def build_partition_key_definition(partition_key_paths: Sequence[str]) -> PartitionKey:
    """Partition key definition for one path, or a hierarchical one for several."""
    if len(partition_key_paths) == 1:
        return PartitionKey(path=partition_key_paths[0])
    return PartitionKey(path=list(partition_key_paths), kind="MultiHash")


async def ensure_container(
    database: DatabaseProxy,
    container_name: str,
    partition_key_paths: Sequence[str],
    is_emulator: bool = False,
) -> ContainerProxy:
    """Ensure container exists, create it if it doesn't.

    Args:
        database: Database proxy
        container_name: Container name
        partition_key_paths: Partition key paths in hierarchy order
        is_emulator: Provision throughput, which the emulator requires

    Returns:
        Container proxy
    """
    pk = build_partition_key_definition(partition_key_paths)
    try:
        if is_emulator:
            container = await database.create_container_if_not_exists(
                id=container_name,
                partition_key=pk,
                offer_throughput=EMULATOR_THROUGHPUT,
            )
        else:
            container = await database.create_container_if_not_exists(
                id=container_name,
                partition_key=pk,
            )
    except Exception as e:
        logger.error("Failed to create container '%s': %s", container_name, e)
        raise

    logger.info(
        "Container '%s' initialized with partition key %s",
        container_name,
        list(partition_key_paths),
    )
    return container


async def get_container(client: CosmosClient, config: CosmosConfig) -> ContainerProxy:
    """Get the configured container, creating database and container when missing.

    Args:
        client: Async Cosmos client
        config: Cosmos configuration

    Returns:
        Container proxy
    """
    database = await client.create_database_if_not_exists(id=config.cosmos_db)
    logger.info("Database '%s' initialized", config.cosmos_db)
    return await ensure_container(
        database,
        config.cosmos_container,
        config.cosmos_partition_key_paths,
        is_emulator=config.is_emulator,
    )
