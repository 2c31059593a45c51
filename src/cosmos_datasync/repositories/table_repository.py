"""Cosmos DB table repository with partition-aware ids and optimistic concurrency."""

import logging
import uuid
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from azure.cosmos.exceptions import (
    CosmosAccessConditionFailedError,
    CosmosHttpResponseError,
    CosmosResourceExistsError,
    CosmosResourceNotFoundError,
)

from cosmos_datasync.config.repository_options import CosmosRepositoryOptions, with_precondition
from cosmos_datasync.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    PreconditionFailedError,
    RepositoryError,
)
from cosmos_datasync.models.table_data import CosmosTableData
from cosmos_datasync.services.document_mapper import EntityDocumentMapper
from cosmos_datasync.services.identifiers import ParsedId
from cosmos_datasync.services.partition_key import build_partition_key, partition_key_values
from cosmos_datasync.services.serializer import CosmosDatasyncSerializer

if TYPE_CHECKING:
    from azure.core.async_paging import AsyncItemPaged
    from azure.cosmos.aio import ContainerProxy

logger = logging.getLogger(__name__)


class CosmosTableRepository[TEntity: CosmosTableData]:
    """Create, read, replace and delete entities in a Cosmos DB container.

    Callers address entities by a single external id. The repository splits
    it into the document id and partition key the container needs, and
    reattaches it on every entity it hands back. The repository keeps no
    state besides its configuration, so one instance can serve concurrent
    callers.
    """

    def __init__(
        self,
        container: "ContainerProxy",
        entity_type: type[TEntity],
        options: CosmosRepositoryOptions | None = None,
        serializer: CosmosDatasyncSerializer | None = None,
    ) -> None:
        """Initialize repository.

        Args:
            container: Async Cosmos container proxy
            entity_type: Entity model class stored in the container
            options: Repository options. If None, partitions on ``id``.
            serializer: Document serializer. If None, uses the default serializer.
        """
        if container is None:
            raise InvalidArgumentError("container is required")

        self.container = container
        self.entity_type = entity_type
        self.options = options or CosmosRepositoryOptions()
        self.mapper = EntityDocumentMapper(entity_type, serializer)

    def _parse_id(self, external_id: str | None) -> ParsedId:
        if not external_id:
            raise InvalidArgumentError("id is required")
        parsed = self.options.parse_id_and_partition_key(external_id)
        if not parsed.id:
            raise InvalidArgumentError(f"Invalid id {external_id!r}: document id is empty")
        return parsed

    def _external_id(self, entity: TEntity) -> str:
        """External id of an entity whose ``id`` holds its document id."""
        if self.options.partitioned_by_id:
            return entity.id
        return self.options.format_id(
            entity.id, partition_key_values(entity, self.options.partition_key_property_names)
        )

    def _check_external_id(self, external_id: str, pending: TEntity) -> None:
        """Reject an external id whose partition suffix disagrees with the entity's fields."""
        expected = self._external_id(pending)
        if external_id != expected:
            raise InvalidArgumentError(
                f"Id {external_id!r} does not match the entity's partition key properties; expected {expected!r}"
            )

    def _request_options(self, version: bytes | None) -> dict[str, Any]:
        if self.options.native_preconditions:
            return with_precondition(self.options.item_request_options, version)
        return dict(self.options.item_request_options)

    def _refresh_system_properties(self, entity: TEntity, stored: dict[str, Any]) -> None:
        result = self.mapper.from_document(stored)
        entity.updated_at = result.updated_at
        entity.entity_tag = result.entity_tag

    async def _read_for_error(self, external_id: str) -> TEntity | None:
        try:
            return await self.read(external_id)
        except RepositoryError:
            logger.warning("Could not read back entity %s after a failed write", external_id)
            return None

    def query(
        self,
        query: str,
        parameters: list[dict[str, Any]] | None = None,
        partition_key: Any = None,
        **kwargs: Any,
    ) -> "AsyncItemPaged[dict[str, Any]]":
        """Run a SQL query against the container.

        Documents are returned as stored: their ``id`` is the document id,
        not the external id. Use ``query_entities`` to get entities with
        external ids.

        Args:
            query: Cosmos SQL query string
            parameters: Query parameters as ``{"name": ..., "value": ...}`` dicts
            partition_key: Restrict the query to one partition
            **kwargs: Further options for ``ContainerProxy.query_items``

        Returns:
            Async pager over raw documents
        """
        if parameters is not None:
            kwargs["parameters"] = parameters
        if partition_key is not None:
            kwargs["partition_key"] = partition_key
        return self.container.query_items(query=query, **kwargs)

    async def query_entities(
        self,
        query: str,
        parameters: list[dict[str, Any]] | None = None,
        partition_key: Any = None,
        **kwargs: Any,
    ) -> AsyncIterator[TEntity]:
        """Run a SQL query and yield entities carrying their external ids."""
        try:
            async for document in self.query(query, parameters, partition_key, **kwargs):
                entity = self.mapper.from_document(document)
                entity.id = self._external_id(entity)
                yield entity
        except CosmosHttpResponseError as e:
            logger.error("Failed to query container: %s", e)
            raise RepositoryError(str(e), e) from e

    async def create(self, entity: TEntity) -> None:
        """Create an entity.

        An empty document id in ``entity.id`` asks for a generated one. On
        success ``entity`` gets its external id, ``updated_at`` and entity tag.

        Raises:
            InvalidArgumentError: If entity is None, its partition properties are invalid
                or its id names a different partition than its properties
            ConflictError: If a document with the same id exists; payload is the stored entity
            RepositoryError: For any other store failure
        """
        if entity is None:
            raise InvalidArgumentError("entity is required")

        parsed_id = self.options.parse_id_and_partition_key(entity.id).id if entity.id else ""
        document_id = parsed_id or uuid.uuid4().hex

        pending = entity.model_copy(update={"id": document_id, "updated_at": datetime.now(UTC)})
        external_id = self._external_id(pending)
        if parsed_id and entity.id != parsed_id:
            self._check_external_id(entity.id, pending)

        partition_key = build_partition_key(pending, self.options.partition_key_property_names)
        document = self.mapper.to_document(pending, document_id)

        try:
            created = await self.container.create_item(body=document, **self.options.item_request_options)
        except CosmosResourceExistsError as e:
            logger.warning("Entity %s already exists in partition %s", external_id, partition_key)
            stored = await self._read_for_error(external_id)
            raise ConflictError(stored) from e
        except CosmosHttpResponseError as e:
            logger.error("Failed to create entity %s: %s", external_id, e)
            raise RepositoryError(str(e), e) from e

        entity.id = external_id
        self._refresh_system_properties(entity, created)
        logger.info("Created entity %s", external_id)

    async def read(self, entity_id: str) -> TEntity | None:
        """Read an entity by external id.

        Returns:
            The entity, or None if it does not exist

        Raises:
            InvalidArgumentError: If the id is empty or malformed
            RepositoryError: For any store failure other than not found
        """
        document_id, partition_key = self._parse_id(entity_id)
        try:
            document = await self.container.read_item(
                item=document_id, partition_key=partition_key, **self.options.item_request_options
            )
        except CosmosResourceNotFoundError:
            logger.debug("Entity %s not found", entity_id)
            return None
        except CosmosHttpResponseError as e:
            logger.error("Failed to read entity %s: %s", entity_id, e)
            raise RepositoryError(str(e), e) from e

        logger.debug("Read entity %s", entity_id)
        return self.mapper.from_document(document, entity_id)

    async def replace(self, entity: TEntity, version: bytes | None = None) -> None:
        """Replace a stored entity.

        When ``version`` is given the stored entity must carry that version.
        It is checked against a fresh read and, with ``native_preconditions``,
        also sent as an If-Match so a write racing between the two fails too.

        Raises:
            InvalidArgumentError: If entity is None, has no id or its id names a
                different partition than its properties
            NotFoundError: If no entity is stored under the id
            PreconditionFailedError: On version mismatch; payload is the stored entity
            RepositoryError: For any other store failure
        """
        if entity is None:
            raise InvalidArgumentError("entity is required")
        document_id, _ = self._parse_id(entity.id)

        stored = await self.read(entity.id)
        if stored is None:
            raise NotFoundError(entity.id)
        if version and stored.version != version:
            logger.warning("Version mismatch replacing entity %s", entity.id)
            raise PreconditionFailedError(stored)

        pending = entity.model_copy(update={"id": document_id, "updated_at": datetime.now(UTC)})
        self._check_external_id(entity.id, pending)
        document = self.mapper.to_document(pending, document_id)

        try:
            replaced = await self.container.replace_item(
                item=document_id, body=document, **self._request_options(version)
            )
        except CosmosResourceNotFoundError as e:
            raise NotFoundError(entity.id) from e
        except CosmosAccessConditionFailedError as e:
            logger.warning("Entity %s changed before it could be replaced", entity.id)
            raise PreconditionFailedError(await self._read_for_error(entity.id)) from e
        except CosmosHttpResponseError as e:
            logger.error("Failed to replace entity %s: %s", entity.id, e)
            raise RepositoryError(str(e), e) from e

        self._refresh_system_properties(entity, replaced)
        logger.info("Replaced entity %s", entity.id)

    async def delete(self, entity_id: str, version: bytes | None = None) -> None:
        """Delete an entity by external id.

        Raises:
            InvalidArgumentError: If the id is empty or malformed
            NotFoundError: If no entity is stored under the id
            PreconditionFailedError: On version mismatch; payload is the stored entity
            RepositoryError: For any other store failure
        """
        document_id, partition_key = self._parse_id(entity_id)

        if version:
            stored = await self.read(entity_id)
            if stored is None:
                raise NotFoundError(entity_id)
            if stored.version != version:
                logger.warning("Version mismatch deleting entity %s", entity_id)
                raise PreconditionFailedError(stored)

        try:
            await self.container.delete_item(
                item=document_id, partition_key=partition_key, **self._request_options(version)
            )
        except CosmosResourceNotFoundError as e:
            raise NotFoundError(entity_id) from e
        except CosmosAccessConditionFailedError as e:
            logger.warning("Entity %s changed before it could be deleted", entity_id)
            raise PreconditionFailedError(await self._read_for_error(entity_id)) from e
        except CosmosHttpResponseError as e:
            logger.error("Failed to delete entity %s: %s", entity_id, e)
            raise RepositoryError(str(e), e) from e

        logger.info("Deleted entity %s", entity_id)
