"""Service catalog operations on top of the service repository."""
from __future__ import annotations

import logging
from typing import List, Optional

from c4catalog.domain.entities import ServiceModel
from c4catalog.domain.enums import ServiceLifecycle, ServiceType, parse_enum
from c4catalog.domain.errors import NotFoundError
from c4catalog.domain.events import ServiceCreated, ServiceDeleted, event_publisher
from c4catalog.domain.specifications import FieldEquals, FieldEqualsIgnoreCase, MatchAll, TextSearch
from c4catalog.repositories import ServiceRepository
from c4catalog.schemas.api_schemas import CreateServiceRequest, ServiceDependencies, UpdateServiceRequest

logger = logging.getLogger(__name__)


class ServiceCatalogService:
    """Registers services and answers catalog queries."""

    def __init__(self, services: ServiceRepository) -> None:
        self._services = services

    def list_services(
        self,
        team: Optional[str] = None,
        system: Optional[str] = None,
        lifecycle: Optional[str] = None,
    ) -> List[ServiceModel]:
        """All services, narrowed by owner team, system and lifecycle when given."""
        spec = MatchAll()
        if team:
            spec = spec.and_(FieldEqualsIgnoreCase("owner", team))
        if system:
            spec = spec.and_(FieldEqualsIgnoreCase("system", system))
        if lifecycle:
            spec = spec.and_(FieldEquals("lifecycle", parse_enum(ServiceLifecycle, lifecycle, "lifecycle")))
        return self._services.find(spec)

    def get_service(self, service_id: str) -> Optional[ServiceModel]:
        return self._services.get_by_id(service_id)

    def require_service(self, service_id: str) -> ServiceModel:
        service = self._services.get_by_id(service_id)
        if service is None:
            raise NotFoundError(f"Service with ID '{service_id}' not found")
        return service

    def create_service(self, request: CreateServiceRequest) -> ServiceModel:
        service_type = parse_enum(ServiceType, request.type, "service type")
        lifecycle = ServiceLifecycle.DEVELOPMENT
        if request.lifecycle:
            lifecycle = parse_enum(ServiceLifecycle, request.lifecycle, "lifecycle")

        service = ServiceModel(
            id=request.id,
            name=request.name,
            description=request.description,
            type=service_type,
            owner=request.owner,
            repository=request.repository,
            documentation=request.documentation,
            api_spec=request.api_spec,
            tags=request.tags or [],
            lifecycle=lifecycle,
            system=request.system,
            depends_on=request.depends_on or [],
            provides_apis=request.provides_apis or [],
            consumes_apis=request.consumes_apis or [],
        )
        created = self._services.create(service)
        logger.info("Created service %s for owner %s", created.id, created.owner)
        event_publisher.publish(ServiceCreated(aggregate_id=created.id, name=created.name, owner=created.owner))
        return created

    def update_service(self, service_id: str, request: UpdateServiceRequest) -> ServiceModel:
        """Merge the supplied fields into the stored service."""
        existing = self.require_service(service_id)

        changes = request.model_dump(exclude_none=True, exclude={"type", "lifecycle"})
        if request.type:
            changes["type"] = parse_enum(ServiceType, request.type, "service type")
        if request.lifecycle:
            changes["lifecycle"] = parse_enum(ServiceLifecycle, request.lifecycle, "lifecycle")

        updated = self._services.update(existing.model_copy(update=changes))
        logger.info("Updated service %s", service_id)
        return updated

    def delete_service(self, service_id: str) -> bool:
        deleted = self._services.delete(service_id)
        if deleted:
            logger.info("Deleted service %s", service_id)
            event_publisher.publish(ServiceDeleted(aggregate_id=service_id))
        return deleted

    def get_teams(self) -> List[str]:
        """Distinct owners, sorted."""
        return sorted({s.owner for s in self._services.get_all() if s.owner})

    def get_dependencies(self, service_id: str) -> ServiceDependencies:
        all_services = self._services.get_all()
        target = next((s for s in all_services if s.id == service_id), None)
        if target is None:
            return ServiceDependencies(service_id=service_id)

        return ServiceDependencies(
            service_id=service_id,
            dependencies=[s for s in all_services if s.id in target.depends_on],
            dependents=[s for s in all_services if service_id in s.depends_on],
        )

    def search_services(self, query: str) -> List[ServiceModel]:
        if not query or not query.strip():
            return self._services.get_all()
        return self._services.find(
            TextSearch(query.strip(), ("name", "description", "owner"), list_fields=("tags",))
        )

    def get_services_by_owner(self, owner: str) -> List[ServiceModel]:
        return self._services.find_by_owner(owner)

    def get_services_by_type(self, service_type: str) -> List[ServiceModel]:
        return self._services.find_by_type(parse_enum(ServiceType, service_type, "service type"))

    def exists(self, service_id: str) -> bool:
        return self._services.exists(service_id)
