"""Base Pydantic model for entities stored through the table repository."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ID_SEPARATOR = ":"


class CosmosTableData(BaseModel):
    """Entity stored in a Cosmos DB container.

    ``id`` is the external id seen by callers. It may carry a partition
    suffix (``"<document id>:<partition values>"``); the document itself is
    always stored under ``lookup_id``.
    """

    id: str = Field("", description="External id, possibly with a partition suffix")
    entity_tag: str | None = Field(None, alias="_etag", description="Cosmos DB entity tag")
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Last write timestamp"
    )
    deleted: bool = Field(False, description="Soft-delete flag")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @property
    def lookup_id(self) -> str:
        """Document id: the external id without its partition suffix."""
        return self.id.split(ID_SEPARATOR, 1)[0] if self.id else ""

    @property
    def version(self) -> bytes:
        """Concurrency token as bytes; empty when no tag is present."""
        return (self.entity_tag or "").encode("utf-8")

    def with_version(self, version: bytes) -> None:
        self.entity_tag = version.decode("utf-8") if version else None

    def has_same_system_properties(self, other: "CosmosTableData | None") -> bool:
        return (
            other is not None
            and self.id == other.id
            and self.updated_at == other.updated_at
            and self.deleted == other.deleted
            and self.version == other.version
        )
