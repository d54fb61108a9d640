from fastapi import APIRouter, Depends, Query, Response
from typing import List, Optional

from c4catalog.application.service_catalog_service import ServiceCatalogService
from c4catalog.dependencies import get_service_catalog_service
from c4catalog.domain.entities import ServiceModel
from c4catalog.domain.errors import NotFoundError
from c4catalog.schemas.api_schemas import (
    CreateServiceRequest,
    ServiceDependencies,
    UpdateServiceRequest,
)

router = APIRouter(prefix="/api/services")


@router.get("", response_model=List[ServiceModel])
def list_services(
    team: Optional[str] = None,
    system: Optional[str] = None,
    lifecycle: Optional[str] = None,
    catalog: ServiceCatalogService = Depends(get_service_catalog_service),
):
    """
    List catalog services, optionally filtered by owning team, system and lifecycle.
    """
    return catalog.list_services(team=team, system=system, lifecycle=lifecycle)


@router.get("/teams", response_model=List[str])
def get_teams(catalog: ServiceCatalogService = Depends(get_service_catalog_service)):
    """Distinct service owners."""
    return catalog.get_teams()


@router.get("/search", response_model=List[ServiceModel])
def search_services(
    q: str = Query("", description="Matched against name, description, owner and tags"),
    catalog: ServiceCatalogService = Depends(get_service_catalog_service),
):
    return catalog.search_services(q)


@router.post("", response_model=ServiceModel, status_code=201)
def create_service(
    request: CreateServiceRequest,
    catalog: ServiceCatalogService = Depends(get_service_catalog_service),
):
    """
    Register a new service in the catalog.
    """
    return catalog.create_service(request)


@router.get("/{service_id}", response_model=ServiceModel)
def get_service(service_id: str, catalog: ServiceCatalogService = Depends(get_service_catalog_service)):
    return catalog.require_service(service_id)


@router.put("/{service_id}", response_model=ServiceModel)
def update_service(
    service_id: str,
    request: UpdateServiceRequest,
    catalog: ServiceCatalogService = Depends(get_service_catalog_service),
):
    """
    Update the supplied fields of a service.
    """
    return catalog.update_service(service_id, request)


@router.delete("/{service_id}", status_code=204)
def delete_service(service_id: str, catalog: ServiceCatalogService = Depends(get_service_catalog_service)):
    if not catalog.delete_service(service_id):
        raise NotFoundError(f"Service with ID '{service_id}' not found")
    return Response(status_code=204)


@router.get("/{service_id}/dependencies", response_model=ServiceDependencies)
def get_dependencies(service_id: str, catalog: ServiceCatalogService = Depends(get_service_catalog_service)):
    """
    Services this service depends on, and services that depend on it.
    """
    catalog.require_service(service_id)
    return catalog.get_dependencies(service_id)
