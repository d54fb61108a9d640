"""Diagram operations: CRUD, summaries, nested element/relationship edits."""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from c4catalog.domain.entities import (
    DiagramElement,
    DiagramMetadata,
    DiagramModel,
    DiagramRelationship,
    Position,
)
from c4catalog.domain.enums import DiagramType, ElementType, parse_enum
from c4catalog.domain.errors import NotFoundError
from c4catalog.domain.events import DiagramCreated, DiagramDeleted, event_publisher
from c4catalog.domain.specifications import FieldEquals, FieldEqualsIgnoreCase, MatchAll
from c4catalog.repositories import DiagramRepository, ServiceRepository
from c4catalog.schemas.api_schemas import (
    CreateDiagramRequest,
    DiagramSummary,
    UpdateDiagramRequest,
    UpdateElementRequest,
)

logger = logging.getLogger(__name__)

# Layout used when generating a diagram from the service catalog
GENERATED_COLUMN_SPACING = 200
GENERATED_ROW_Y = 320


def to_summary(diagram: DiagramModel) -> DiagramSummary:
    return DiagramSummary(
        id=diagram.id,
        name=diagram.name,
        type=diagram.type.value,
        system=diagram.system,
        description=diagram.description,
        element_count=len(diagram.elements),
        relationship_count=len(diagram.relationships),
        updated_at=diagram.metadata.updated_at,
    )


class DiagramService:
    """Orchestrates the diagram repository; does no broadcasting itself."""

    def __init__(self, diagrams: DiagramRepository, services: ServiceRepository) -> None:
        self._diagrams = diagrams
        self._services = services

    def list_summaries(self, diagram_type: Optional[str] = None, system: Optional[str] = None) -> List[DiagramSummary]:
        spec = MatchAll()
        if diagram_type:
            spec = spec.and_(FieldEquals("type", parse_enum(DiagramType, diagram_type, "diagram type")))
        if system:
            spec = spec.and_(FieldEqualsIgnoreCase("system", system))
        return [to_summary(d) for d in self._diagrams.find(spec)]

    def get_diagram(self, diagram_id: str) -> Optional[DiagramModel]:
        return self._diagrams.get_by_id(diagram_id)

    def require_diagram(self, diagram_id: str) -> DiagramModel:
        diagram = self._diagrams.get_by_id(diagram_id)
        if diagram is None:
            raise NotFoundError(f"Diagram with ID '{diagram_id}' not found")
        return diagram

    def create_diagram(self, request: CreateDiagramRequest) -> DiagramModel:
        diagram_type = parse_enum(DiagramType, request.type, "diagram type")
        diagram_id = request.id or self._generate_id(request.system or "system", diagram_type)

        diagram = DiagramModel(
            id=diagram_id,
            name=request.name,
            type=diagram_type,
            system=request.system,
            description=request.description,
            metadata=DiagramMetadata(parent_diagram=request.parent_diagram),
        )
        created = self._diagrams.create(diagram)
        logger.info("Created %s diagram %s", diagram_type.value, created.id)
        event_publisher.publish(
            DiagramCreated(aggregate_id=created.id, name=created.name, diagram_type=diagram_type.value)
        )
        return created

    def update_diagram(self, diagram_id: str, request: UpdateDiagramRequest) -> DiagramModel:
        """Merge supplied fields; elements/relationships are replaced wholesale when given."""
        existing = self.require_diagram(diagram_id)
        changes = {
            key: value
            for key, value in {
                "name": request.name,
                "description": request.description,
                "elements": request.elements,
                "relationships": request.relationships,
            }.items()
            if value is not None
        }
        updated = self._diagrams.update(existing.model_copy(update=changes))
        logger.info("Updated diagram %s", diagram_id)
        return updated

    def delete_diagram(self, diagram_id: str) -> bool:
        deleted = self._diagrams.delete(diagram_id)
        if deleted:
            logger.info("Deleted diagram %s", diagram_id)
            event_publisher.publish(DiagramDeleted(aggregate_id=diagram_id))
        return deleted

    # Elements and relationships

    def add_element(self, diagram_id: str, element: DiagramElement) -> DiagramModel:
        return self._diagrams.add_element(diagram_id, element)

    def replace_element(self, diagram_id: str, element: DiagramElement) -> DiagramModel:
        return self._diagrams.update_element(diagram_id, element.id, element)

    def update_element(self, diagram_id: str, element_id: str, request: UpdateElementRequest) -> DiagramElement:
        """Merge supplied fields into one element and return the stored element."""
        diagram = self.require_diagram(diagram_id)
        current = next((e for e in diagram.elements if e.id == element_id), None)
        if current is None:
            raise NotFoundError(f"Element with ID '{element_id}' does not exist in diagram")

        changes = {
            key: getattr(request, key)
            for key in ("name", "description", "technology", "position", "size", "style")
            if getattr(request, key) is not None
        }
        merged = current.model_copy(update=changes)
        updated = self._diagrams.update_element(diagram_id, element_id, merged)
        return next(e for e in updated.elements if e.id == element_id)

    def remove_element(self, diagram_id: str, element_id: str) -> DiagramModel:
        return self._diagrams.remove_element(diagram_id, element_id)

    def list_relationships(self, diagram_id: str) -> List[DiagramRelationship]:
        return list(self.require_diagram(diagram_id).relationships)

    def add_relationship(self, diagram_id: str, relationship: DiagramRelationship) -> DiagramModel:
        return self._diagrams.add_relationship(diagram_id, relationship)

    def remove_relationship(self, diagram_id: str, relationship_id: str) -> DiagramModel:
        return self._diagrams.remove_relationship(diagram_id, relationship_id)

    def exists(self, diagram_id: str) -> bool:
        return self._diagrams.exists(diagram_id)

    def generate_from_service(self, service_id: str, diagram_type: str = "context") -> DiagramModel:
        """
        Build and persist a diagram of a catalog service and its direct
        dependencies, one external system per known dependency.
        """
        parsed_type = parse_enum(DiagramType, diagram_type, "diagram type")
        service = self._services.get_by_id(service_id)
        if service is None:
            raise NotFoundError(f"Service with ID '{service_id}' not found")

        elements = [
            DiagramElement(
                id=service.id,
                type=ElementType.SYSTEM,
                name=service.name,
                description=service.description,
                position=Position(x=0, y=0),
            )
        ]
        relationships = []
        for column, dependency_id in enumerate(service.depends_on):
            dependency = self._services.get_by_id(dependency_id)
            if dependency is None:
                continue
            elements.append(
                DiagramElement(
                    id=dependency.id,
                    type=ElementType.EXTERNAL_SYSTEM,
                    name=dependency.name,
                    description=dependency.description,
                    position=Position(x=column * GENERATED_COLUMN_SPACING, y=GENERATED_ROW_Y),
                )
            )
            relationships.append(
                DiagramRelationship(
                    id=f"{service.id}-uses-{dependency.id}",
                    source_id=service.id,
                    target_id=dependency.id,
                    description="Uses",
                )
            )

        diagram = DiagramModel(
            id=self._generate_id(service.system or service.id, parsed_type),
            name=f"{service.name} {parsed_type.value} diagram",
            type=parsed_type,
            system=service.system,
            description=f"Generated from service '{service.id}'",
            elements=elements,
            relationships=relationships,
        )
        created = self._diagrams.create(diagram)
        logger.info("Generated diagram %s from service %s", created.id, service_id)
        return created

    @staticmethod
    def _generate_id(prefix: str, diagram_type: DiagramType) -> str:
        return f"{prefix}-{diagram_type.value.lower()}-{uuid.uuid4().hex[:8]}"
