"""
c4-catalog-api Application Package

Directory Structure:
├── routers/           # FastAPI route handlers (HTTP + WebSocket hubs)
├── schemas/           # Pydantic models for API requests/responses
│   └── api_schemas.py # HTTP request/response structures
├── application/       # Service layer orchestrating repositories
├── repositories/      # One JSON-file repository per entity kind
├── store/             # Generic JSON entity store with per-collection index
├── domain/            # Entities, enums, errors, events, specifications
├── realtime/          # WebSocket room broadcaster
└── config.py          # Application configuration

Persistence Layout:
    <DATA_DIR>/<collection>/<id>.json   # one file per entity
    <DATA_DIR>/<collection>/index.json  # derived list of ids, rebuilt on every write

The index is a cache. It is regenerated from a directory scan after every
write or delete, so a stale index heals itself on the next mutation.
"""
