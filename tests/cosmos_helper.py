"""In-memory Cosmos container and test entities."""

import copy
import json
import time
import uuid
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from typing import Any

import anyio
from azure.core import MatchConditions
from azure.cosmos.exceptions import (
    CosmosAccessConditionFailedError,
    CosmosHttpResponseError,
    CosmosResourceExistsError,
    CosmosResourceNotFoundError,
)

from cosmos_datasync.models.table_data import CosmosTableData


class Movie(CosmosTableData):
    """Test entity partitioned by rating."""

    title: str = ""
    rating: str | None = "NR"
    year: int = 0
    duration: int = 0
    best_picture_winner: bool = False
    release_date: datetime | None = None


def black_panther() -> Movie:
    return Movie(
        title="Black Panther",
        rating="PG-13",
        year=2018,
        duration=134,
        best_picture_winner=True,
        release_date=datetime(2018, 2, 16, tzinfo=UTC),
    )


class FakeContainer:
    """In-memory stand-in for ``azure.cosmos.aio.ContainerProxy``.

    Documents are keyed by partition key and id, numeric key values are
    compared as doubles and ``If-Match`` preconditions are honoured.
    """

    def __init__(self, partition_key_paths: list[str] | None = None) -> None:
        self.partition_key_paths = partition_key_paths or ["/id"]
        self.items: dict[tuple[str, str], dict[str, Any]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.delay = 0.0
        self.error: CosmosHttpResponseError | None = None

    @staticmethod
    def _normalize(value: Any) -> Any:
        if isinstance(value, bool) or value is None:
            return value
        if isinstance(value, int | float):
            return float(value)
        return value

    def _key_from_body(self, body: dict[str, Any]) -> str:
        return json.dumps([self._normalize(body.get(path.lstrip("/"))) for path in self.partition_key_paths])

    def _key_from_value(self, partition_key: Any) -> str:
        values = partition_key if isinstance(partition_key, list) else [partition_key]
        return json.dumps([self._normalize(value) for value in values])

    async def _enter(self, operation: str, kwargs: dict[str, Any]) -> None:
        self.calls.append((operation, kwargs))
        if self.delay:
            await anyio.sleep(self.delay)
        if self.error is not None:
            raise self.error

    @staticmethod
    def _check_precondition(stored: dict[str, Any], kwargs: dict[str, Any]) -> None:
        if kwargs.get("match_condition") == MatchConditions.IfNotModified and kwargs.get("etag") != stored["_etag"]:
            raise CosmosAccessConditionFailedError(status_code=412, message="Precondition failed")

    @staticmethod
    def _stamp(body: dict[str, Any]) -> dict[str, Any]:
        document = copy.deepcopy(body)
        document["_etag"] = f'"{uuid.uuid4()}"'
        document["_rid"] = uuid.uuid4().hex[:12]
        document["_self"] = f"dbs/test/colls/movies/docs/{document['_rid']}/"
        document["_attachments"] = "attachments/"
        document["_ts"] = int(time.time())
        return document

    def seed(self, body: dict[str, Any]) -> dict[str, Any]:
        document = self._stamp(body)
        self.items[(self._key_from_body(body), body["id"])] = document
        return copy.deepcopy(document)

    def stored(self, item: str, partition_key: Any) -> dict[str, Any] | None:
        document = self.items.get((self._key_from_value(partition_key), item))
        return copy.deepcopy(document) if document else None

    async def create_item(self, body: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        await self._enter("create_item", kwargs)
        key = (self._key_from_body(body), body["id"])
        if key in self.items:
            raise CosmosResourceExistsError(status_code=409, message="Entity with the specified id already exists")
        self.items[key] = self._stamp(body)
        return copy.deepcopy(self.items[key])

    async def read_item(self, item: str, partition_key: Any, **kwargs: Any) -> dict[str, Any]:
        await self._enter("read_item", kwargs)
        document = self.items.get((self._key_from_value(partition_key), item))
        if document is None:
            raise CosmosResourceNotFoundError(status_code=404, message="Entity not found")
        return copy.deepcopy(document)

    async def replace_item(self, item: str, body: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        await self._enter("replace_item", kwargs)
        key = (self._key_from_body(body), item)
        stored = self.items.get(key)
        if stored is None:
            raise CosmosResourceNotFoundError(status_code=404, message="Entity not found")
        self._check_precondition(stored, kwargs)
        self.items[key] = self._stamp(body)
        return copy.deepcopy(self.items[key])

    async def delete_item(self, item: str, partition_key: Any, **kwargs: Any) -> None:
        await self._enter("delete_item", kwargs)
        key = (self._key_from_value(partition_key), item)
        stored = self.items.get(key)
        if stored is None:
            raise CosmosResourceNotFoundError(status_code=404, message="Entity not found")
        self._check_precondition(stored, kwargs)
        del self.items[key]

    def query_items(self, query: str, **kwargs: Any) -> AsyncIterator[dict[str, Any]]:
        self.calls.append(("query_items", {"query": query, **kwargs}))
        partition_key = kwargs.get("partition_key")
        wanted = self._key_from_value(partition_key) if partition_key is not None else None

        async def iterate() -> AsyncIterator[dict[str, Any]]:
            if self.error is not None:
                raise self.error
            for (key, _), document in list(self.items.items()):
                if wanted is None or key == wanted:
                    yield copy.deepcopy(document)

        return iterate()


