"""
Health check endpoints for the API.
"""
from fastapi import APIRouter, Depends
from typing import Dict, Any
from datetime import datetime, timezone
from pathlib import Path

from c4catalog.config import settings
from c4catalog.dependencies import get_data_dir
from c4catalog.store import INDEX_FILE

router = APIRouter()

COLLECTIONS = ("services", "diagrams", "pipelines", "pipeline-executions", "projects")


@router.get("/health")
def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.
    Returns API status and version information.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT
    }


@router.get("/health/storage")
def storage_health(data_dir: str = Depends(get_data_dir)) -> Dict[str, Any]:
    """
    Check JSON storage health.
    Reports, per collection, whether its directory exists and how many
    entity files it holds.
    """
    root = Path(data_dir)
    try:
        collections = {}
        for name in COLLECTIONS:
            directory = root / name
            entity_count = 0
            if directory.is_dir():
                entity_count = sum(
                    1 for path in directory.glob("*.json") if path.name.lower() != INDEX_FILE
                )
            collections[name] = {"exists": directory.is_dir(), "entities": entity_count}

        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "dataDir": str(root),
            "collections": collections,
        }

    except OSError as e:
        return {
            "status": "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "error": str(e)
        }
