"""Identifier, partition key and document mapping services."""

from cosmos_datasync.services.document_mapper import EntityDocumentMapper
from cosmos_datasync.services.identifiers import (
    ParsedId,
    format_id,
    parse_id_and_partition_key,
    typed_id_parser,
)
from cosmos_datasync.services.partition_key import (
    build_partition_key,
    partition_key_values,
    translate_to_external_id,
)
from cosmos_datasync.services.serializer import CosmosDatasyncSerializer, format_datetime

__all__ = [
    "CosmosDatasyncSerializer",
    "EntityDocumentMapper",
    "ParsedId",
    "build_partition_key",
    "format_datetime",
    "format_id",
    "parse_id_and_partition_key",
    "partition_key_values",
    "translate_to_external_id",
    "typed_id_parser",
]
