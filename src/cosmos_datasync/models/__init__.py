"""Entity models package."""

from cosmos_datasync.models.table_data import CosmosTableData

__all__ = ["CosmosTableData"]
