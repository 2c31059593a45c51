"""Cosmos DB infrastructure."""

from cosmos_datasync.infra.cosmos.cosmos_base import (
    build_partition_key_definition,
    create_cosmos_client,
    ensure_container,
    get_container,
)

__all__ = ["build_partition_key_definition", "create_cosmos_client", "ensure_container", "get_container"]
