"""Options for the Cosmos table repository."""

from collections.abc import Callable, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from azure.core import MatchConditions
from pydantic import BaseModel, ConfigDict, Field, field_validator

from cosmos_datasync.services.identifiers import ParsedId, format_id, parse_id_and_partition_key

DEFAULT_PARTITION_KEY_PROPERTY_NAMES = ("id",)


class CosmosRepositoryOptions(BaseModel):
    """Immutable repository configuration."""

    partition_key_property_names: tuple[str, ...] = Field(
        DEFAULT_PARTITION_KEY_PROPERTY_NAMES,
        description="Entity properties forming the partition key, in container order",
    )
    item_request_options: Mapping[str, Any] = Field(
        default_factory=dict,
        validate_default=True,
        description="Keyword arguments passed to every point operation of the container",
    )
    parse_id_and_partition_key: Callable[[str], ParsedId] = Field(
        parse_id_and_partition_key, description="Decodes an external id"
    )
    format_id: Callable[[str, Sequence[Any]], str] = Field(format_id, description="Encodes an external id")
    native_preconditions: bool = Field(
        True, description="Also send the expected version as an If-Match precondition"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("partition_key_property_names", mode="before")
    @classmethod
    def _default_property_names(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_PARTITION_KEY_PROPERTY_NAMES
        return value

    @field_validator("partition_key_property_names")
    @classmethod
    def _check_property_names(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("partition_key_property_names must not be empty")
        return value

    @field_validator("item_request_options")
    @classmethod
    def _freeze_request_options(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @property
    def partitioned_by_id(self) -> bool:
        """True when documents are partitioned on their own id only."""
        return self.partition_key_property_names == DEFAULT_PARTITION_KEY_PROPERTY_NAMES


def with_precondition(base: Mapping[str, Any], version: bytes | None) -> dict[str, Any]:
    """Return request options for one call, adding an If-Match on ``version``.

    Args:
        base: Shared request options; never modified
        version: Expected entity version, or None/empty for no precondition

    Returns:
        New request options dictionary
    """
    options = dict(base)
    if version:
        options["etag"] = version.decode("utf-8")
        options["match_condition"] = MatchConditions.IfNotModified
    return options
