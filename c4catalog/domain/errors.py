"""Domain error hierarchy for clean exception handling."""
from __future__ import annotations


class DomainError(Exception):
    """Base for all domain errors."""


class NotFoundError(DomainError):
    """Entity not found."""


class ValidationError(DomainError):
    """Invalid argument: empty id, unknown enum value, dangling reference."""


class ConflictError(DomainError):
    """Entity or nested child id already in use."""


class StorageError(DomainError):
    """Entity file could not be read, parsed or written."""

    def __init__(self, message: str, *, collection: str, entity_id: str | None, operation: str) -> None:
        super().__init__(message)
        self.collection = collection
        self.entity_id = entity_id
        self.operation = operation
