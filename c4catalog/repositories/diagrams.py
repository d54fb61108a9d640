from __future__ import annotations

from typing import List

from c4catalog.domain.entities import DiagramElement, DiagramModel, DiagramRelationship
from c4catalog.domain.enums import DiagramType
from c4catalog.domain.errors import ConflictError, NotFoundError, ValidationError
from c4catalog.domain.specifications import FieldEquals, FieldEqualsIgnoreCase
from c4catalog.repositories.base import JsonRepository


class DiagramRepository(JsonRepository[DiagramModel]):
    """
    Diagrams plus read-modify-write mutators for their elements and
    relationships.

    Mutators read the stored diagram, validate against that snapshot and
    write a whole new diagram back. Two callers mutating the same diagram
    at once both start from the same snapshot, and the later write wins.
    """

    collection = "diagrams"
    model = DiagramModel
    label = "Diagram"

    def find_by_type(self, diagram_type: DiagramType) -> List[DiagramModel]:
        return self.find(FieldEquals("type", diagram_type))

    def find_by_system(self, system: str) -> List[DiagramModel]:
        if not system:
            return []
        return self.find(FieldEqualsIgnoreCase("system", system))

    def add_element(self, diagram_id: str, element: DiagramElement) -> DiagramModel:
        diagram = self._require_existing(diagram_id)
        if not element.id:
            raise ValidationError("Element ID cannot be null or empty")
        if any(e.id == element.id for e in diagram.elements):
            raise ConflictError(f"Element with ID '{element.id}' already exists in diagram")

        return self.update(diagram.model_copy(update={"elements": [*diagram.elements, element]}))

    def update_element(self, diagram_id: str, element_id: str, element: DiagramElement) -> DiagramModel:
        diagram = self._require_existing(diagram_id)
        index = next((i for i, e in enumerate(diagram.elements) if e.id == element_id), None)
        if index is None:
            raise NotFoundError(f"Element with ID '{element_id}' does not exist in diagram")

        elements = list(diagram.elements)
        elements[index] = element.model_copy(update={"id": element_id})
        return self.update(diagram.model_copy(update={"elements": elements}))

    def remove_element(self, diagram_id: str, element_id: str) -> DiagramModel:
        """Remove an element and every relationship that references it."""
        diagram = self._require_existing(diagram_id)
        elements = [e for e in diagram.elements if e.id != element_id]
        if len(elements) == len(diagram.elements):
            raise NotFoundError(f"Element with ID '{element_id}' does not exist in diagram")

        relationships = [
            r for r in diagram.relationships
            if r.source_id != element_id and r.target_id != element_id
        ]
        return self.update(diagram.model_copy(update={"elements": elements, "relationships": relationships}))

    def add_relationship(self, diagram_id: str, relationship: DiagramRelationship) -> DiagramModel:
        diagram = self._require_existing(diagram_id)
        if not relationship.id:
            raise ValidationError("Relationship ID cannot be null or empty")
        if any(r.id == relationship.id for r in diagram.relationships):
            raise ConflictError(f"Relationship with ID '{relationship.id}' already exists in diagram")

        element_ids = {e.id for e in diagram.elements}
        if relationship.source_id not in element_ids:
            raise ValidationError(f"Source element '{relationship.source_id}' does not exist in diagram")
        if relationship.target_id not in element_ids:
            raise ValidationError(f"Target element '{relationship.target_id}' does not exist in diagram")

        return self.update(
            diagram.model_copy(update={"relationships": [*diagram.relationships, relationship]})
        )

    def remove_relationship(self, diagram_id: str, relationship_id: str) -> DiagramModel:
        diagram = self._require_existing(diagram_id)
        relationships = [r for r in diagram.relationships if r.id != relationship_id]
        if len(relationships) == len(diagram.relationships):
            raise NotFoundError(f"Relationship with ID '{relationship_id}' does not exist in diagram")

        return self.update(diagram.model_copy(update={"relationships": relationships}))
