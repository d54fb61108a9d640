from .json_store import JsonEntityStore, INDEX_FILE, is_valid_entity_id

__all__ = ["JsonEntityStore", "INDEX_FILE", "is_valid_entity_id"]
