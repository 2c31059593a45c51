"""Configuration package."""

from cosmos_datasync.config.cosmos_config import CosmosConfig, get_cosmos_config
from cosmos_datasync.config.repository_options import CosmosRepositoryOptions, with_precondition

__all__ = ["CosmosConfig", "CosmosRepositoryOptions", "get_cosmos_config", "with_precondition"]
