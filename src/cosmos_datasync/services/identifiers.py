"""Encoding of external ids into a document id and a partition key.

An external id is either a bare document id (the document is partitioned
on its own id) or ``"<document id>:<value>|<value>|..."`` where the values
after the colon are the partition key components in declared order.
Neither separator is escaped, so partition values must not contain ``:``
or ``|``.
"""

from collections.abc import Callable, Sequence
from typing import Any, NamedTuple

from cosmos_datasync.errors import MalformedIdentifierError

ID_SEPARATOR = ":"
KEY_SEPARATOR = "|"

type PartitionKeyScalar = str | float | bool
type PartitionKeyValue = PartitionKeyScalar | list[PartitionKeyScalar]


class ParsedId(NamedTuple):
    """Result of decoding an external id."""

    id: str
    partition_key: PartitionKeyValue


def parse_id_and_partition_key(external_id: str) -> ParsedId:
    """Split an external id into a document id and a partition key.

    Args:
        external_id: Id as seen by callers

    Returns:
        The document id (empty when the caller wants a generated id) and the
        partition key: a string for one component, a list for several

    Raises:
        MalformedIdentifierError: If the id is empty or has an empty
            partition section
    """
    if not external_id:
        raise MalformedIdentifierError(external_id, "id is empty")
    if ID_SEPARATOR not in external_id:
        return ParsedId(external_id, external_id)

    document_id, _, keys_part = external_id.partition(ID_SEPARATOR)
    if not keys_part:
        raise MalformedIdentifierError(external_id, "partition key section is empty")

    keys = keys_part.split(KEY_SEPARATOR)
    if any(not key for key in keys):
        raise MalformedIdentifierError(external_id, "partition key component is empty")
    if len(keys) == 1:
        return ParsedId(document_id, keys[0])
    return ParsedId(document_id, keys)


def format_partition_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_id(document_id: str, partition_values: Sequence[Any]) -> str:
    """Build an external id from a document id and partition key values."""
    if not partition_values:
        return document_id
    keys = KEY_SEPARATOR.join(format_partition_value(value) for value in partition_values)
    return f"{document_id}{ID_SEPARATOR}{keys}"


def _to_bool(component: str) -> bool:
    lowered = component.lower()
    if lowered not in ("true", "false"):
        raise ValueError(f"{component!r} is not a boolean")
    return lowered == "true"


_CONVERTERS: dict[type, Callable[[str], PartitionKeyScalar]] = {
    str: str,
    float: float,
    int: float,
    bool: _to_bool,
}


def typed_id_parser(component_types: Sequence[type]) -> Callable[[str], ParsedId]:
    """Create a decode strategy that restores typed partition key components.

    The default parser returns every component as a string, which only
    matches documents whose partition properties are strings. This parser
    converts component ``n`` with ``component_types[n]`` (``str``, ``int``,
    ``float`` or ``bool``; integers become floats like every numeric key).
    A bare id keeps its default meaning of a key equal to the id.
    """
    try:
        converters = [_CONVERTERS[component_type] for component_type in component_types]
    except KeyError as e:
        raise ValueError(f"Unsupported partition key component type: {e.args[0]!r}") from e

    def parse(external_id: str) -> ParsedId:
        parsed = parse_id_and_partition_key(external_id)
        if ID_SEPARATOR not in external_id:
            return parsed

        keys = parsed.partition_key if isinstance(parsed.partition_key, list) else [parsed.partition_key]
        if len(keys) != len(converters):
            raise MalformedIdentifierError(
                external_id, f"expected {len(converters)} partition key components, got {len(keys)}"
            )
        try:
            values = [convert(key) for convert, key in zip(converters, keys, strict=True)]
        except ValueError as e:
            raise MalformedIdentifierError(external_id, str(e)) from e
        return ParsedId(parsed.id, values[0] if len(values) == 1 else values)

    return parse
