"""Repositories package."""

from cosmos_datasync.repositories.table_repository import CosmosTableRepository

__all__ = ["CosmosTableRepository"]
