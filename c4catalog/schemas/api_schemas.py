"""
API Request/Response Schemas using Pydantic.

Structure of HTTP requests and responses for the catalog API. Field names
travel as lowerCamelCase; enum-valued request fields are plain strings and
are parsed strictly by the service layer.
"""
from pydantic import Field
from typing import Dict, List, Optional
from datetime import datetime

from c4catalog.domain.entities import (
    CamelModel,
    DiagramElement,
    DiagramRelationship,
    ElementStyle,
    PipelineStage,
    PipelineTriggers,
    Position,
    ProjectSettings,
    ServiceModel,
    Size,
)

# Error schemas
class ErrorResponse(CamelModel):
    error: str = Field(..., description="Human readable error message")

class MessageResponse(CamelModel):
    message: str = Field(..., description="Outcome of the operation")

# Service catalog schemas
class CreateServiceRequest(CamelModel):
    id: str = Field(..., description="Unique service identifier", min_length=1)
    name: str = Field(..., description="Display name of the service", min_length=1, max_length=255)
    description: Optional[str] = Field(None, description="Optional description")
    type: str = Field(..., description="service, website or library")
    owner: str = Field(..., description="Owning team", min_length=1)
    repository: Optional[str] = None
    documentation: Optional[str] = None
    api_spec: Optional[str] = None
    tags: Optional[List[str]] = None
    lifecycle: Optional[str] = Field(None, description="Defaults to development")
    system: Optional[str] = None
    depends_on: Optional[List[str]] = None
    provides_apis: Optional[List[str]] = None
    consumes_apis: Optional[List[str]] = None

class UpdateServiceRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    owner: Optional[str] = None
    repository: Optional[str] = None
    documentation: Optional[str] = None
    api_spec: Optional[str] = None
    tags: Optional[List[str]] = None
    lifecycle: Optional[str] = None
    system: Optional[str] = None
    depends_on: Optional[List[str]] = None
    provides_apis: Optional[List[str]] = None
    consumes_apis: Optional[List[str]] = None

class ServiceDependencies(CamelModel):
    service_id: str
    dependencies: List[ServiceModel] = Field(default_factory=list)
    dependents: List[ServiceModel] = Field(default_factory=list)

# Diagram schemas
class CreateDiagramRequest(CamelModel):
    id: Optional[str] = Field(None, description="Generated when omitted")
    name: str = Field(..., description="Name of the diagram", min_length=1, max_length=255)
    type: str = Field(..., description="context, container, component or code")
    system: Optional[str] = None
    description: Optional[str] = None
    parent_diagram: Optional[str] = None

class UpdateDiagramRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    elements: Optional[List[DiagramElement]] = None
    relationships: Optional[List[DiagramRelationship]] = None

class UpdateElementRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    technology: Optional[str] = None
    position: Optional[Position] = None
    size: Optional[Size] = None
    style: Optional[ElementStyle] = None

class DiagramSummary(CamelModel):
    id: str
    name: str
    type: str
    system: Optional[str] = None
    description: Optional[str] = None
    element_count: int = 0
    relationship_count: int = 0
    updated_at: datetime

# Pipeline schemas
class CreatePipelineRequest(CamelModel):
    id: Optional[str] = Field(None, description="Generated when omitted")
    service_id: str = Field(..., description="Service the pipeline builds", min_length=1)
    name: str = Field(..., description="Name of the pipeline", min_length=1, max_length=255)
    description: Optional[str] = None
    stages: List[PipelineStage] = Field(default_factory=list)
    triggers: Optional[PipelineTriggers] = None
    environment: Optional[Dict[str, str]] = None

class UpdatePipelineRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    stages: Optional[List[PipelineStage]] = None
    triggers: Optional[PipelineTriggers] = None
    environment: Optional[Dict[str, str]] = None

class ExecutePipelineRequest(CamelModel):
    triggered_by: Optional[str] = None
    parameters: Optional[Dict[str, str]] = None

class AddLogEntryRequest(CamelModel):
    level: str = Field("info", description="debug, info, warning or error")
    message: str = Field(..., min_length=1)
    stage_id: Optional[str] = None
    stage: Optional[str] = None

class ExecutionSummary(CamelModel):
    id: str
    status: str
    started_at: Optional[datetime] = None
    duration: Optional[int] = None
    build_number: int = 0

class PipelineSummary(CamelModel):
    id: str
    service_id: str
    name: str
    description: Optional[str] = None
    stage_count: int = 0
    last_execution: Optional[ExecutionSummary] = None
    updated_at: datetime

# Project schemas
class CreateProjectRequest(CamelModel):
    id: str = Field(..., description="Unique project identifier", min_length=1)
    name: str = Field(..., description="Name of the project", min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    owner: str = Field(..., description="Owning person or team", min_length=1)
    type: str = Field("webApplication", description="Project type")
    tags: Optional[List[str]] = None
    settings: Optional[ProjectSettings] = None

class UpdateProjectRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    owner: Optional[str] = None
    status: Optional[str] = None
    tags: Optional[List[str]] = None
    settings: Optional[ProjectSettings] = None

class AddTeamMemberRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    role: str = Field(..., description="owner, maintainer, developer, contributor or viewer")

class ProjectSummary(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    owner: str
    type: str
    status: str
    service_count: int = 0
    diagram_count: int = 0
    pipeline_count: int = 0
    team_member_count: int = 0
    updated_at: datetime
    tags: List[str] = Field(default_factory=list)
