"""Persisted domain entities.

Entities are pydantic models serialized with lowerCamelCase field names.
Updates never mutate an entity in place; callers derive a new value with
``model_copy(update=...)`` and hand it back to the repository.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from c4catalog.domain.enums import (
    DiagramType,
    ElementType,
    ExecutionStatus,
    LogLevel,
    ProjectRole,
    ProjectStatus,
    ProjectType,
    ServiceLifecycle,
    ServiceType,
    StageType,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model reading and writing lowerCamelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )


class EntityMetadata(CamelModel):
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    created_by: Optional[str] = None


# Service catalog

class ServiceMetadata(EntityMetadata):
    version: Optional[str] = None
    health_check_url: Optional[str] = None


class ServiceModel(CamelModel):
    id: str = ""
    name: str = ""
    description: Optional[str] = None
    type: ServiceType = ServiceType.SERVICE
    owner: str = ""
    repository: Optional[str] = None
    documentation: Optional[str] = None
    api_spec: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    lifecycle: ServiceLifecycle = ServiceLifecycle.EXPERIMENTAL
    system: Optional[str] = None
    depends_on: List[str] = Field(default_factory=list)
    provides_apis: List[str] = Field(default_factory=list)
    consumes_apis: List[str] = Field(default_factory=list)
    metadata: ServiceMetadata = Field(default_factory=ServiceMetadata)


# Architecture diagrams

class Position(CamelModel):
    x: float = 0
    y: float = 0


class Size(CamelModel):
    width: float = 120
    height: float = 80


class ElementStyle(CamelModel):
    background_color: Optional[str] = None
    color: Optional[str] = None
    border_color: Optional[str] = None
    border_width: Optional[float] = None
    shape: Optional[str] = None


class RelationshipStyle(CamelModel):
    line_style: Optional[str] = None
    arrow_style: Optional[str] = None
    color: Optional[str] = None
    width: Optional[float] = None


class DiagramElement(CamelModel):
    id: str = ""
    type: ElementType = ElementType.SYSTEM
    name: str = ""
    description: Optional[str] = None
    technology: Optional[str] = None
    position: Position = Field(default_factory=Position)
    size: Size = Field(default_factory=Size)
    style: ElementStyle = Field(default_factory=ElementStyle)
    properties: Dict[str, Any] = Field(default_factory=dict)


class DiagramRelationship(CamelModel):
    id: str = ""
    source_id: str = ""
    target_id: str = ""
    description: Optional[str] = None
    technology: Optional[str] = None
    style: RelationshipStyle = Field(default_factory=RelationshipStyle)


class DiagramMetadata(EntityMetadata):
    version: Optional[str] = "1.0"
    parent_diagram: Optional[str] = None
    child_diagrams: List[str] = Field(default_factory=list)


class DiagramModel(CamelModel):
    id: str = ""
    name: str = ""
    type: DiagramType = DiagramType.CONTEXT
    system: Optional[str] = None
    description: Optional[str] = None
    elements: List[DiagramElement] = Field(default_factory=list)
    relationships: List[DiagramRelationship] = Field(default_factory=list)
    metadata: DiagramMetadata = Field(default_factory=DiagramMetadata)


# Pipelines

class HealthCheck(CamelModel):
    url: Optional[str] = None
    interval: int = 10
    timeout: int = 5
    retries: int = 3


class PipelineStep(CamelModel):
    id: str = ""
    name: str = ""
    command: str = ""
    environment: Dict[str, str] = Field(default_factory=dict)
    timeout: int = 300


class PipelineStage(CamelModel):
    id: str = ""
    name: str = ""
    type: StageType = StageType.BUILD
    commands: List[str] = Field(default_factory=list)
    steps: List[PipelineStep] = Field(default_factory=list)
    working_directory: Optional[str] = None
    docker_file: Optional[str] = None
    image_name: Optional[str] = None
    image_tag: Optional[str] = None
    container_name: Optional[str] = None
    ports: List[str] = Field(default_factory=list)
    environment: Dict[str, str] = Field(default_factory=dict)
    volumes: List[str] = Field(default_factory=list)
    build_args: Dict[str, str] = Field(default_factory=dict)
    health_check: Optional[HealthCheck] = None
    timeout: int = 300
    retry_count: int = 0


class PipelineTriggers(CamelModel):
    manual: bool = True
    on_diagram_change: bool = False
    on_repository_change: bool = False
    scheduled: Optional[str] = None


class PipelineConfiguration(CamelModel):
    id: str = ""
    service_id: str = ""
    name: str = ""
    description: Optional[str] = None
    stages: List[PipelineStage] = Field(default_factory=list)
    triggers: PipelineTriggers = Field(default_factory=PipelineTriggers)
    metadata: EntityMetadata = Field(default_factory=EntityMetadata)
    environment: Dict[str, str] = Field(default_factory=dict)


class ExecutionLogEntry(CamelModel):
    timestamp: datetime = Field(default_factory=utc_now)
    level: LogLevel = LogLevel.INFO
    message: str = ""
    stage_id: Optional[str] = None
    stage: Optional[str] = None


class StepExecution(CamelModel):
    step_id: str = ""
    step_name: str = ""
    status: ExecutionStatus = ExecutionStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration: Optional[int] = None
    logs: List[str] = Field(default_factory=list)


class StageExecution(CamelModel):
    stage_id: str = ""
    stage_name: str = ""
    status: ExecutionStatus = ExecutionStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration: Optional[int] = None
    logs: List[str] = Field(default_factory=list)
    artifacts: List[str] = Field(default_factory=list)
    steps: List[StepExecution] = Field(default_factory=list)
    deployment_url: Optional[str] = None


class PipelineExecution(CamelModel):
    id: str = ""
    pipeline_id: str = ""
    status: ExecutionStatus = ExecutionStatus.QUEUED
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration: Optional[int] = None
    triggered_by: Optional[str] = None
    build_number: int = 0
    stage_executions: List[StageExecution] = Field(default_factory=list)
    parameters: Dict[str, str] = Field(default_factory=dict)
    logs: List[ExecutionLogEntry] = Field(default_factory=list)


# Projects

class ProjectTeamMember(CamelModel):
    name: str = ""
    email: str = ""
    role: ProjectRole = ProjectRole.DEVELOPER
    joined_at: datetime = Field(default_factory=utc_now)


class ProjectSettings(CamelModel):
    repository: Optional[str] = None
    documentation: Optional[str] = None
    slack_channel: Optional[str] = None
    jira_project: Optional[str] = None
    is_public: bool = True
    enable_notifications: bool = True
    allowed_domains: List[str] = Field(default_factory=list)


class ProjectMetadata(EntityMetadata):
    version: Optional[str] = "1.0"
    template: Optional[str] = None
    custom_fields: Dict[str, Any] = Field(default_factory=dict)


class ProjectModel(CamelModel):
    id: str = ""
    name: str = ""
    description: Optional[str] = None
    owner: str = ""
    type: ProjectType = ProjectType.WEB_APPLICATION
    status: ProjectStatus = ProjectStatus.PLANNING
    tags: List[str] = Field(default_factory=list)
    services: List[str] = Field(default_factory=list)
    diagrams: List[str] = Field(default_factory=list)
    pipelines: List[str] = Field(default_factory=list)
    team_members: List[ProjectTeamMember] = Field(default_factory=list)
    settings: ProjectSettings = Field(default_factory=ProjectSettings)
    metadata: ProjectMetadata = Field(default_factory=ProjectMetadata)


class ProjectTemplate(CamelModel):
    id: str = ""
    name: str = ""
    description: Optional[str] = None
    category: str = ""
    default_type: ProjectType = ProjectType.WEB_APPLICATION
    pre_configured_services: List[str] = Field(default_factory=list)
    pre_configured_diagrams: List[str] = Field(default_factory=list)
    default_tags: List[str] = Field(default_factory=list)
    default_settings: ProjectSettings = Field(default_factory=ProjectSettings)
