"""Mapping between entities and stored documents."""

from typing import Any

from cosmos_datasync.errors import InvalidArgumentError
from cosmos_datasync.models.table_data import CosmosTableData
from cosmos_datasync.services.serializer import CosmosDatasyncSerializer

ID_FIELD = "id"
ETAG_FIELD = "_etag"
COSMOS_SYSTEM_FIELDS = frozenset({"_rid", "_self", "_attachments", "_ts"})


class EntityDocumentMapper[T: CosmosTableData]:
    """Swaps the external id for the document id on the way in and back on the way out."""

    def __init__(self, entity_type: type[T], serializer: CosmosDatasyncSerializer | None = None) -> None:
        """Initialize mapper.

        Args:
            entity_type: Entity model class
            serializer: Document serializer. If None, uses the default serializer.
        """
        self.entity_type = entity_type
        self.serializer = serializer or CosmosDatasyncSerializer()

    def to_document(self, entity: T | None, lookup_id: str) -> dict[str, Any]:
        """Serialize an entity for writing under ``lookup_id``.

        Args:
            entity: Entity to serialize
            lookup_id: Document id the store addresses the record by

        Returns:
            Document with ``id`` set to ``lookup_id``
        """
        if entity is None:
            raise InvalidArgumentError("entity is required")
        if not lookup_id:
            raise InvalidArgumentError("lookup_id cannot be null or empty")

        document = self.serializer.serialize(entity)
        # The store owns the entity tag; preconditions travel in request options.
        document.pop(ETAG_FIELD, None)
        document[ID_FIELD] = lookup_id
        return document

    def from_document(self, document: dict[str, Any], external_id: str | None = None) -> T:
        """Deserialize a stored document and reattach the external id.

        Args:
            document: Document returned by the store
            external_id: Id to expose to callers. If None, the stored id is kept.

        Returns:
            Entity instance
        """
        filtered = {k: v for k, v in document.items() if k not in COSMOS_SYSTEM_FIELDS}
        entity = self.serializer.deserialize(filtered, self.entity_type)
        if external_id is not None:
            entity.id = external_id
        return entity
