"""
JSON entity store - one file per entity plus a derived per-collection index.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from c4catalog.domain.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

INDEX_FILE = "index.json"
ENTITY_SUFFIX = ".json"
UNSAFE_ID_PARTS = ("/", "\\", "\x00", "..")


def is_valid_entity_id(entity_id: Optional[str]) -> bool:
    """Whether the id can name a file of its own inside the collection directory."""
    if not entity_id or not str(entity_id).strip():
        return False
    text = str(entity_id)
    if any(part in text for part in UNSAFE_ID_PARTS):
        return False
    return f"{text}{ENTITY_SUFFIX}".lower() != INDEX_FILE


class JsonEntityStore(Generic[T]):
    """
    Persists one entity kind as ``<data_dir>/<collection>/<id>.json``.

    ``index.json`` lists the ids present in the collection directory. It is
    rebuilt from a directory scan after every write and delete, so it never
    drifts from the files for longer than one mutation. Nothing is locked:
    the entity file and the index are written separately.
    """

    def __init__(self, data_dir: Path | str, collection: str, model: Type[T]) -> None:
        self.collection = collection
        self.model = model
        self.entity_dir = Path(data_dir) / collection
        self.entity_dir.mkdir(parents=True, exist_ok=True)

    @property
    def index_path(self) -> Path:
        return self.entity_dir / INDEX_FILE

    def entity_path(self, entity_id: str) -> Path:
        """
        File holding the entity.

        Raises:
            ValidationError: The id would escape the collection directory or
                collide with the index file
        """
        if not is_valid_entity_id(entity_id):
            raise ValidationError(f"Invalid {self.collection} ID: '{entity_id}'")
        path = self.entity_dir / f"{entity_id}{ENTITY_SUFFIX}"
        if path.resolve().parent != self.entity_dir.resolve():
            raise ValidationError(f"Invalid {self.collection} ID: '{entity_id}'")
        return path

    def read(self, entity_id: str) -> Optional[T]:
        """
        Load one entity.

        Returns:
            The entity, or None if its file does not exist

        Raises:
            StorageError: The file exists but cannot be read or parsed
        """
        path = self.entity_path(entity_id)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as handle:
                raw = json.load(handle)
            return self.model.model_validate(raw)
        except (OSError, json.JSONDecodeError, PydanticValidationError) as exc:
            logger.error(
                "Failed to read entity %s from collection %s (%s)",
                entity_id, self.collection, path, exc_info=True,
            )
            raise StorageError(
                f"Failed to read {self.collection}/{entity_id}: {exc}",
                collection=self.collection, entity_id=entity_id, operation="read",
            ) from exc

    def write(self, entity_id: str, entity: T) -> T:
        """Serialize and overwrite the entity file, then rebuild the index."""
        path = self.entity_path(entity_id)
        try:
            payload = entity.model_dump(mode="json", by_alias=True)
            with path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
        except OSError as exc:
            logger.error(
                "Failed to write entity %s to collection %s (%s)",
                entity_id, self.collection, path, exc_info=True,
            )
            raise StorageError(
                f"Failed to write {self.collection}/{entity_id}: {exc}",
                collection=self.collection, entity_id=entity_id, operation="write",
            ) from exc

        self.rebuild_index()
        logger.debug("Wrote entity %s to %s", entity_id, path)
        return entity

    def delete(self, entity_id: str) -> bool:
        """Remove the entity file if present and rebuild the index."""
        path = self.entity_path(entity_id)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as exc:
            logger.error(
                "Failed to delete entity %s from collection %s (%s)",
                entity_id, self.collection, path, exc_info=True,
            )
            raise StorageError(
                f"Failed to delete {self.collection}/{entity_id}: {exc}",
                collection=self.collection, entity_id=entity_id, operation="delete",
            ) from exc

        self.rebuild_index()
        logger.debug("Deleted entity %s from %s", entity_id, path)
        return True

    def list(self) -> List[T]:
        """
        Load every entity named in the index.

        Ids whose file has disappeared since the index was written are
        skipped. A file that exists but cannot be parsed fails the call.
        """
        entities: List[T] = []
        for entity_id in self.read_index():
            if not is_valid_entity_id(entity_id):
                logger.warning("Skipping invalid id %r in index of %s", entity_id, self.collection)
                continue
            entity = self.read(entity_id)
            if entity is not None:
                entities.append(entity)
        return entities

    def exists(self, entity_id: str) -> bool:
        return self.entity_path(entity_id).exists()

    def filter(self, predicate: Callable[[T], bool]) -> List[T]:
        """Full scan via list(); there are no secondary indexes."""
        return [entity for entity in self.list() if predicate(entity)]

    def read_index(self) -> List[str]:
        """Ids recorded in the index file; empty if the index is absent."""
        if not self.index_path.exists():
            return []
        try:
            with self.index_path.open("r", encoding="utf-8") as handle:
                ids = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to read index of collection %s", self.collection, exc_info=True)
            raise StorageError(
                f"Failed to read index of {self.collection}: {exc}",
                collection=self.collection, entity_id=None, operation="read_index",
            ) from exc
        if ids is None:
            return []
        if not isinstance(ids, list):
            logger.error("Index of collection %s is not a list of ids", self.collection)
            raise StorageError(
                f"Index of {self.collection} is not a list of ids",
                collection=self.collection, entity_id=None, operation="read_index",
            )
        return [str(entity_id) for entity_id in ids]

    def rebuild_index(self) -> List[str]:
        """
        Regenerate the index from the entity files on disk.

        Returns:
            The sorted ids written to the index
        """
        try:
            ids = sorted(
                path.stem
                for path in self.entity_dir.glob(f"*{ENTITY_SUFFIX}")
                if path.is_file() and path.name.lower() != INDEX_FILE and path.stem
            )
            with self.index_path.open("w", encoding="utf-8") as handle:
                json.dump(ids, handle, indent=2)
        except OSError as exc:
            logger.error("Failed to update index in %s", self.entity_dir, exc_info=True)
            raise StorageError(
                f"Failed to update index of {self.collection}: {exc}",
                collection=self.collection, entity_id=None, operation="rebuild_index",
            ) from exc

        logger.debug("Updated %s index with %d entities", self.collection, len(ids))
        return ids
