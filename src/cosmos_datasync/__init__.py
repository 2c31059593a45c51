"""Partition-aware Cosmos DB table repository."""

from cosmos_datasync.config import CosmosConfig, CosmosRepositoryOptions, get_cosmos_config, with_precondition
from cosmos_datasync.errors import (
    ConflictError,
    DatasyncError,
    InvalidArgumentError,
    MalformedIdentifierError,
    NotFoundError,
    NullValueError,
    PreconditionFailedError,
    RepositoryError,
)
from cosmos_datasync.models import CosmosTableData
from cosmos_datasync.repositories import CosmosTableRepository
from cosmos_datasync.services import (
    CosmosDatasyncSerializer,
    EntityDocumentMapper,
    ParsedId,
    build_partition_key,
    format_id,
    parse_id_and_partition_key,
    translate_to_external_id,
    typed_id_parser,
)

__all__ = [
    "ConflictError",
    "CosmosConfig",
    "CosmosDatasyncSerializer",
    "CosmosRepositoryOptions",
    "CosmosTableData",
    "CosmosTableRepository",
    "DatasyncError",
    "EntityDocumentMapper",
    "InvalidArgumentError",
    "MalformedIdentifierError",
    "NotFoundError",
    "NullValueError",
    "ParsedId",
    "PreconditionFailedError",
    "RepositoryError",
    "build_partition_key",
    "format_id",
    "get_cosmos_config",
    "parse_id_and_partition_key",
    "translate_to_external_id",
    "typed_id_parser",
    "with_precondition",
]
