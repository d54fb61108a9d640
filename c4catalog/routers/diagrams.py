from fastapi import APIRouter, Depends, Query, Response
from typing import List, Optional

from c4catalog.application.diagram_service import DiagramService
from c4catalog.dependencies import get_diagram_service
from c4catalog.domain.entities import DiagramElement, DiagramModel, DiagramRelationship
from c4catalog.domain.errors import NotFoundError
from c4catalog.schemas.api_schemas import (
    CreateDiagramRequest,
    DiagramSummary,
    UpdateDiagramRequest,
    UpdateElementRequest,
)

router = APIRouter(prefix="/api/diagrams")


@router.get("", response_model=List[DiagramSummary])
def list_diagrams(
    type: Optional[str] = None,
    system: Optional[str] = None,
    diagrams: DiagramService = Depends(get_diagram_service),
):
    """
    List diagram summaries, optionally filtered by diagram type and system.
    """
    return diagrams.list_summaries(diagram_type=type, system=system)


@router.post("", response_model=DiagramModel, status_code=201)
def create_diagram(request: CreateDiagramRequest, diagrams: DiagramService = Depends(get_diagram_service)):
    return diagrams.create_diagram(request)


@router.post("/generate/{service_id}", response_model=DiagramModel, status_code=201)
def generate_diagram(
    service_id: str,
    type: str = Query("context", description="Diagram type to generate"),
    diagrams: DiagramService = Depends(get_diagram_service),
):
    """
    Generate a diagram of a catalog service and its direct dependencies.
    """
    return diagrams.generate_from_service(service_id, type)


@router.get("/{diagram_id}", response_model=DiagramModel)
def get_diagram(diagram_id: str, diagrams: DiagramService = Depends(get_diagram_service)):
    return diagrams.require_diagram(diagram_id)


@router.put("/{diagram_id}", response_model=DiagramModel)
def update_diagram(
    diagram_id: str,
    request: UpdateDiagramRequest,
    diagrams: DiagramService = Depends(get_diagram_service),
):
    return diagrams.update_diagram(diagram_id, request)


@router.delete("/{diagram_id}", status_code=204)
def delete_diagram(diagram_id: str, diagrams: DiagramService = Depends(get_diagram_service)):
    if not diagrams.delete_diagram(diagram_id):
        raise NotFoundError(f"Diagram with ID '{diagram_id}' not found")
    return Response(status_code=204)


# Elements

@router.post("/{diagram_id}/elements", response_model=DiagramElement, status_code=201)
def add_element(
    diagram_id: str,
    element: DiagramElement,
    diagrams: DiagramService = Depends(get_diagram_service),
):
    """
    Add an element to a diagram. Element ids are unique within the diagram.
    """
    diagrams.add_element(diagram_id, element)
    return element


@router.put("/{diagram_id}/elements/{element_id}", response_model=DiagramElement)
def update_element(
    diagram_id: str,
    element_id: str,
    request: UpdateElementRequest,
    diagrams: DiagramService = Depends(get_diagram_service),
):
    """
    Update the supplied fields of one element.
    """
    return diagrams.update_element(diagram_id, element_id, request)


@router.delete("/{diagram_id}/elements/{element_id}", status_code=204)
def remove_element(diagram_id: str, element_id: str, diagrams: DiagramService = Depends(get_diagram_service)):
    """
    Remove an element along with every relationship that references it.
    """
    diagrams.remove_element(diagram_id, element_id)
    return Response(status_code=204)


# Relationships

@router.get("/{diagram_id}/relationships", response_model=List[DiagramRelationship])
def list_relationships(diagram_id: str, diagrams: DiagramService = Depends(get_diagram_service)):
    return diagrams.list_relationships(diagram_id)


@router.post("/{diagram_id}/relationships", response_model=DiagramRelationship, status_code=201)
def add_relationship(
    diagram_id: str,
    relationship: DiagramRelationship,
    diagrams: DiagramService = Depends(get_diagram_service),
):
    """
    Connect two existing elements of the diagram.
    """
    diagrams.add_relationship(diagram_id, relationship)
    return relationship


@router.delete("/{diagram_id}/relationships/{relationship_id}", status_code=204)
def remove_relationship(
    diagram_id: str,
    relationship_id: str,
    diagrams: DiagramService = Depends(get_diagram_service),
):
    diagrams.remove_relationship(diagram_id, relationship_id)
    return Response(status_code=204)
