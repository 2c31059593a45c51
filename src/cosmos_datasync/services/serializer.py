"""JSON document serializer for Cosmos DB entities."""

import re
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from enum import Enum
from types import UnionType
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

# Fixed width, seven fractional digits, always UTC.
COSMOS_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%f0Z"

_COSMOS_DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{6}\dZ$")


def format_datetime(value: datetime) -> str:
    """Render a datetime as ``YYYY-MM-DDTHH:MM:SS.fffffffZ`` in UTC.

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(COSMOS_DATETIME_FORMAT)


class CosmosDatasyncSerializer:
    """Converts entities to Cosmos DB documents and back."""

    def __init__(self, ignore_none: bool = False) -> None:
        """Initialize serializer.

        Args:
            ignore_none: Drop keys whose value is None when serializing
        """
        self.ignore_none = ignore_none

    @staticmethod
    def _serialize_values(obj: Any) -> Any:
        """Recursively convert a dumped model into JSON-compatible values.

        Args:
            obj: Value that may contain datetime, enum or other non-JSON objects

        Returns:
            Value with datetimes in the fixed Cosmos format
        """
        if isinstance(obj, datetime):
            return format_datetime(obj)
        elif isinstance(obj, Enum):
            return CosmosDatasyncSerializer._serialize_values(obj.value)
        elif isinstance(obj, dict):
            return {k: CosmosDatasyncSerializer._serialize_values(v) for k, v in obj.items()}
        elif isinstance(obj, list | tuple | set | frozenset):
            return [CosmosDatasyncSerializer._serialize_values(item) for item in obj]
        else:
            return to_jsonable_python(obj)

    @staticmethod
    def _trim_datetime(value: Any) -> Any:
        # Python datetimes hold microseconds; drop the seventh digit
        if isinstance(value, str) and _COSMOS_DATETIME_PATTERN.match(value):
            return value[:-2] + "Z"
        return value

    @classmethod
    def _restore_value(cls, value: Any, annotation: Any) -> Any:
        """Prepare a stored value for validation against its field annotation.

        Only values declared as ``datetime`` are trimmed, so strings in other
        fields come back exactly as written.
        """
        if annotation is datetime:
            return cls._trim_datetime(value)
        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            return cls._restore_document(value, annotation) if isinstance(value, dict) else value

        origin = get_origin(annotation)
        args = get_args(annotation)
        if not args:
            return value
        if origin is Union or origin is UnionType:
            return cls._restore_item(value, args)
        if isinstance(origin, type) and issubclass(origin, Mapping):
            if isinstance(value, dict):
                return {k: cls._restore_value(v, args[-1]) for k, v in value.items()}
            return value
        if isinstance(origin, type) and issubclass(origin, Iterable) and origin is not str:
            if isinstance(value, list):
                return [cls._restore_item(item, args) for item in value]
            return value
        # Annotated and other wrappers: each argument only touches values of its own shape.
        return cls._restore_item(value, args)

    @classmethod
    def _restore_item(cls, value: Any, annotations: tuple[Any, ...]) -> Any:
        for annotation in annotations:
            if annotation is not Ellipsis:
                value = cls._restore_value(value, annotation)
        return value

    @classmethod
    def _restore_document(cls, document: dict[str, Any], model_type: type[BaseModel]) -> dict[str, Any]:
        restored = dict(document)
        for name, field in model_type.model_fields.items():
            for key in {field.alias or name, name}:
                if key in restored:
                    restored[key] = cls._restore_value(restored[key], field.annotation)
        return restored

    def serialize(self, entity: BaseModel) -> dict[str, Any]:
        """Serialize an entity to a document.

        Args:
            entity: Pydantic model instance

        Returns:
            Document as dictionary, keyed by field alias
        """
        document = self._serialize_values(entity.model_dump(by_alias=True, exclude_none=self.ignore_none))
        return document

    def deserialize[T: BaseModel](self, document: dict[str, Any], entity_type: type[T]) -> T:
        """Deserialize a document into an entity.

        Args:
            document: Document as returned by Cosmos DB
            entity_type: Model class to validate into

        Returns:
            Entity instance
        """
        return entity_type.model_validate(self._restore_document(document, entity_type))
