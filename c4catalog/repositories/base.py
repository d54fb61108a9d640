"""Shared contract of the JSON-file repositories."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel

from c4catalog.domain.entities import utc_now
from c4catalog.domain.errors import ConflictError, NotFoundError, ValidationError
from c4catalog.domain.specifications import Specification
from c4catalog.store import JsonEntityStore, is_valid_entity_id

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class JsonRepository(Generic[T]):
    """
    Identity and existence rules on top of a JsonEntityStore.

    Subclasses set ``collection``, ``model`` and ``label``. Entities are
    treated as immutable values: stamping timestamps produces a copy.
    """

    collection: ClassVar[str]
    model: ClassVar[Type[BaseModel]]
    label: ClassVar[str]

    def __init__(self, data_dir: Path | str) -> None:
        self._store: JsonEntityStore[T] = JsonEntityStore(data_dir, self.collection, self.model)

    @property
    def store(self) -> JsonEntityStore[T]:
        return self._store

    def get_all(self) -> List[T]:
        return self._store.list()

    def get_by_id(self, entity_id: str) -> Optional[T]:
        self._require_id(entity_id)
        return self._store.read(entity_id)

    def exists(self, entity_id: str) -> bool:
        if not is_valid_entity_id(entity_id):
            return False
        return self._store.exists(entity_id)

    def create(self, entity: T) -> T:
        if entity is None:
            raise ValidationError(f"{self.label} is required")
        self._require_id(entity.id)
        if self._store.exists(entity.id):
            raise ConflictError(f"{self.label} with ID '{entity.id}' already exists")

        return self._store.write(entity.id, self._stamp_created(entity))

    def update(self, entity: T) -> T:
        if entity is None:
            raise ValidationError(f"{self.label} is required")
        self._require_id(entity.id)
        if not self._store.exists(entity.id):
            raise NotFoundError(f"{self.label} with ID '{entity.id}' does not exist")

        return self._store.write(entity.id, self._stamp_updated(entity))

    def delete(self, entity_id: str) -> bool:
        self._require_id(entity_id)
        return self._store.delete(entity_id)

    def find(self, spec: Specification) -> List[T]:
        return self._store.filter(spec.is_satisfied_by)

    # Helpers

    def _require_id(self, entity_id: str | None) -> None:
        if not entity_id or not str(entity_id).strip():
            raise ValidationError(f"{self.label} ID cannot be null or empty")
        if not is_valid_entity_id(entity_id):
            raise ValidationError(f"{self.label} ID '{entity_id}' is not a valid identifier")

    def _require_existing(self, entity_id: str) -> T:
        """Read the parent of a nested mutation or raise NotFoundError."""
        entity = self.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.label} with ID '{entity_id}' does not exist")
        return entity

    def _stamp_created(self, entity: T) -> T:
        now = utc_now()
        metadata = entity.metadata.model_copy(update={"created_at": now, "updated_at": now})
        return entity.model_copy(update={"metadata": metadata})

    def _stamp_updated(self, entity: T) -> T:
        metadata = entity.metadata.model_copy(update={"updated_at": utc_now()})
        return entity.model_copy(update={"metadata": metadata})
