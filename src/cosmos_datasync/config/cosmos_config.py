"""Configuration management for the Cosmos DB connection."""

import os
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_env_file_path() -> str:
    """Get the path to the .env file.

    Checks for ENV_FILE environment variable first, then defaults to
    .env in the project root.

    Returns:
        Path to the .env file
    """
    env_file = os.getenv("ENV_FILE")
    if env_file:
        return env_file

    # This file is in src/cosmos_datasync/config/cosmos_config.py
    project_dir = Path(__file__).parent.parent.parent.parent
    return str(project_dir / ".env")


class CosmosConfig(BaseSettings):
    """Cosmos DB settings from environment variables."""

    azure_cosmosdb_endpoint: str | None = None
    azure_cosmosdb_key: str | None = None
    use_managed_identity: bool = False
    cosmos_db: str = "datasync"
    cosmos_container: str = "items"
    cosmos_partition_key_paths: list[str] = ["/id"]

    model_config = SettingsConfigDict(
        env_file=_get_env_file_path(),
        case_sensitive=False,
        env_file_encoding="utf-8",
        env_prefix="",
        extra="ignore",
    )

    @field_validator("cosmos_partition_key_paths")
    @classmethod
    def _validate_paths(cls, paths: list[str]) -> list[str]:
        if not paths:
            raise ValueError("cosmos_partition_key_paths must not be empty")
        for path in paths:
            if not path.startswith("/") or len(path) < 2:
                raise ValueError(f"Partition key path {path!r} must look like '/property'")
        return paths

    @property
    def is_emulator(self) -> bool:
        return bool(self.azure_cosmosdb_endpoint) and "localhost" in self.azure_cosmosdb_endpoint.lower()

    @property
    def partition_key_property_names(self) -> tuple[str, ...]:
        """Top-level property names behind the partition key paths ("/rating" -> "rating")."""
        return tuple(path.lstrip("/") for path in self.cosmos_partition_key_paths)


def get_cosmos_config() -> CosmosConfig:
    """Get Cosmos DB configuration.

    Returns:
        CosmosConfig instance
    """
    return CosmosConfig()
