from __future__ import annotations

from fastapi import Depends

from c4catalog.config import settings
from c4catalog.repositories import (
    DiagramRepository,
    PipelineExecutionRepository,
    PipelineRepository,
    ProjectRepository,
    ServiceRepository,
)
from c4catalog.application.service_catalog_service import ServiceCatalogService
from c4catalog.application.diagram_service import DiagramService
from c4catalog.application.pipeline_service import PipelineService
from c4catalog.application.project_service import ProjectService
from c4catalog.domain.ports import BroadcastChannel
from c4catalog.realtime.hub import broadcaster


def get_data_dir() -> str:
    return settings.DATA_DIR


def get_service_repository(data_dir: str = Depends(get_data_dir)) -> ServiceRepository:
    return ServiceRepository(data_dir)


def get_diagram_repository(data_dir: str = Depends(get_data_dir)) -> DiagramRepository:
    return DiagramRepository(data_dir)


def get_pipeline_repository(data_dir: str = Depends(get_data_dir)) -> PipelineRepository:
    return PipelineRepository(data_dir)


def get_execution_repository(data_dir: str = Depends(get_data_dir)) -> PipelineExecutionRepository:
    return PipelineExecutionRepository(data_dir)


def get_project_repository(data_dir: str = Depends(get_data_dir)) -> ProjectRepository:
    return ProjectRepository(data_dir)


def get_service_catalog_service(
    services: ServiceRepository = Depends(get_service_repository),
) -> ServiceCatalogService:
    return ServiceCatalogService(services)


def get_diagram_service(
    diagrams: DiagramRepository = Depends(get_diagram_repository),
    services: ServiceRepository = Depends(get_service_repository),
) -> DiagramService:
    return DiagramService(diagrams, services)


def get_pipeline_service(
    pipelines: PipelineRepository = Depends(get_pipeline_repository),
    executions: PipelineExecutionRepository = Depends(get_execution_repository),
) -> PipelineService:
    return PipelineService(pipelines, executions)


def get_project_service(
    projects: ProjectRepository = Depends(get_project_repository),
    services: ServiceRepository = Depends(get_service_repository),
    diagrams: DiagramRepository = Depends(get_diagram_repository),
    pipelines: PipelineRepository = Depends(get_pipeline_repository),
) -> ProjectService:
    return ProjectService(projects, services, diagrams, pipelines)


def get_broadcast_channel() -> BroadcastChannel:
    return broadcaster
