"""Partition key construction from entity properties."""

import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from enum import Enum
from numbers import Real
from typing import Any

from pydantic import BaseModel

from cosmos_datasync.errors import InvalidArgumentError, NullValueError
from cosmos_datasync.services.identifiers import PartitionKeyScalar, PartitionKeyValue, format_id
from cosmos_datasync.services.serializer import format_datetime

logger = logging.getLogger(__name__)

ID_PROPERTY = "id"


def _resolve_field_name(entity: BaseModel, property_name: str) -> str:
    fields = type(entity).model_fields
    if property_name in fields:
        return property_name
    for name, info in fields.items():
        if info.alias == property_name:
            return name
    raise InvalidArgumentError(f"Property '{property_name}' not found on entity.")


def _to_key_scalar(value: Any) -> PartitionKeyScalar:
    # bool is an int subclass, so it must be tested first
    if isinstance(value, bool):
        return value
    if isinstance(value, Real | Decimal):
        return float(value)
    if isinstance(value, Enum):
        return _to_key_scalar(value.value)
    if isinstance(value, datetime):
        return format_datetime(value)
    return str(value)


def _check_property_names(property_names: Sequence[str] | None) -> None:
    if property_names is None:
        raise InvalidArgumentError("partition_key_property_names is required")
    if not property_names:
        raise InvalidArgumentError("partition_key_property_names is empty")


def partition_key_values(entity: BaseModel, property_names: Sequence[str] | None) -> list[PartitionKeyScalar]:
    """Read the partition key properties of an entity in declared order.

    Numbers become floats, booleans stay booleans and every other value is
    converted to its text form.

    Raises:
        InvalidArgumentError: If no names are given or a property does not exist
        NullValueError: If a property holds ``None``
    """
    _check_property_names(property_names)

    values: list[PartitionKeyScalar] = []
    for property_name in property_names:
        value = getattr(entity, _resolve_field_name(entity, property_name))
        if value is None:
            raise NullValueError(property_name)
        values.append(_to_key_scalar(value))
    return values


def build_partition_key(entity: BaseModel, property_names: Sequence[str] | None) -> PartitionKeyValue:
    """Build the partition key value passed to the Cosmos client.

    A single property gives a scalar key; several properties give a
    hierarchical key as an ordered list.
    """
    values = partition_key_values(entity, property_names)
    logger.debug("Built partition key %s from properties %s", values, list(property_names))
    return values[0] if len(values) == 1 else values


def translate_to_external_id(entity: BaseModel, property_names: Sequence[str] | None) -> str:
    """Build the external id of an entity whose ``id`` is its document id.

    With the default ``["id"]`` partitioning the external id is the
    document id itself.
    """
    _check_property_names(property_names)
    document_id = getattr(entity, ID_PROPERTY)
    if list(property_names) == [ID_PROPERTY]:
        return document_id
    return format_id(document_id, partition_key_values(entity, property_names))
