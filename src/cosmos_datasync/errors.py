"""Error types raised by the Cosmos table repository."""

from typing import Any


class DatasyncError(Exception):
    """Base error for all repository errors."""


class InvalidArgumentError(DatasyncError, ValueError):
    """Raised when a required input is missing or malformed."""


class MalformedIdentifierError(InvalidArgumentError):
    """Raised when an external id cannot be split into id and partition key."""

    def __init__(self, external_id: str | None, reason: str = "malformed identifier") -> None:
        self.external_id = external_id
        super().__init__(f"Invalid id {external_id!r}: {reason}")


class NullValueError(InvalidArgumentError):
    """Raised when a partition key property holds no value."""

    def __init__(self, property_name: str) -> None:
        self.property_name = property_name
        super().__init__(f"Value of property '{property_name}' cannot be null.")


class NotFoundError(DatasyncError):
    """Raised when the target of a mutating operation does not exist."""

    def __init__(self, entity_id: str | None = None) -> None:
        self.entity_id = entity_id
        super().__init__(f"Entity {entity_id!r} not found" if entity_id else "Entity not found")


class ConflictError(DatasyncError):
    """Raised when a create collides with an existing document.

    The stored entity is available as ``payload``.
    """

    def __init__(self, payload: Any) -> None:
        self.payload = payload
        super().__init__("An entity with the same id already exists")


class PreconditionFailedError(DatasyncError):
    """Raised when the expected version does not match the stored version.

    The stored entity is available as ``payload``.
    """

    def __init__(self, payload: Any) -> None:
        self.payload = payload
        super().__init__("The entity version does not match the stored version")


class RepositoryError(DatasyncError):
    """Wraps any other failure reported by the store."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)
