"""Service for project business logic."""
from __future__ import annotations

import logging
from typing import List, Optional

from c4catalog.domain.entities import (
    ProjectModel,
    ProjectSettings,
    ProjectTeamMember,
    ProjectTemplate,
)
from c4catalog.domain.enums import ProjectRole, ProjectStatus, ProjectType, parse_enum
from c4catalog.domain.errors import NotFoundError
from c4catalog.domain.events import ProjectCreated, ProjectDeleted, event_publisher
from c4catalog.repositories import (
    DiagramRepository,
    PipelineRepository,
    ProjectRepository,
    ServiceRepository,
)
from c4catalog.schemas.api_schemas import (
    AddTeamMemberRequest,
    CreateProjectRequest,
    ProjectSummary,
    UpdateProjectRequest,
)

logger = logging.getLogger(__name__)

OWNER_EMAIL_DOMAIN = "company.com"

PROJECT_TEMPLATES: List[ProjectTemplate] = [
    ProjectTemplate(
        id="web-app-template",
        name="Web Application",
        description="Full-stack web application with frontend, backend, and database",
        category="Web Development",
        default_type=ProjectType.WEB_APPLICATION,
        pre_configured_services=["frontend-service", "backend-api", "database"],
        default_tags=["web", "full-stack", "api"],
        default_settings=ProjectSettings(is_public=True, enable_notifications=True),
    ),
    ProjectTemplate(
        id="microservices-template",
        name="Microservices Architecture",
        description="Microservices-based system with multiple services and API gateway",
        category="Architecture",
        default_type=ProjectType.MICROSERVICES,
        pre_configured_services=["api-gateway", "user-service", "notification-service"],
        default_tags=["microservices", "distributed", "api"],
        default_settings=ProjectSettings(is_public=True, enable_notifications=True),
    ),
    ProjectTemplate(
        id="data-platform-template",
        name="Data Platform",
        description="Data processing and analytics platform",
        category="Data & Analytics",
        default_type=ProjectType.DATA_PLATFORM,
        pre_configured_services=["data-ingestion", "data-processing", "analytics-api"],
        default_tags=["data", "analytics", "etl"],
        default_settings=ProjectSettings(is_public=False, enable_notifications=True),
    ),
]


def owner_email(owner: str) -> str:
    return f"{owner.lower().replace(' ', '.')}@{OWNER_EMAIL_DOMAIN}"


def to_summary(project: ProjectModel) -> ProjectSummary:
    return ProjectSummary(
        id=project.id,
        name=project.name,
        description=project.description,
        owner=project.owner,
        type=project.type.value,
        status=project.status.value,
        service_count=len(project.services),
        diagram_count=len(project.diagrams),
        pipeline_count=len(project.pipelines),
        team_member_count=len(project.team_members),
        updated_at=project.metadata.updated_at,
        tags=list(project.tags),
    )


class ProjectService:
    """Projects bundle services, diagrams, pipelines and a team."""

    def __init__(
        self,
        projects: ProjectRepository,
        services: ServiceRepository,
        diagrams: DiagramRepository,
        pipelines: PipelineRepository,
    ) -> None:
        self._projects = projects
        self._services = services
        self._diagrams = diagrams
        self._pipelines = pipelines

    def list_summaries(self) -> List[ProjectSummary]:
        return [to_summary(p) for p in self._projects.get_all()]

    def search(self, term: str) -> List[ProjectSummary]:
        return [to_summary(p) for p in self._projects.search(term)]

    def get_project(self, project_id: str) -> Optional[ProjectModel]:
        return self._projects.get_by_id(project_id)

    def require_project(self, project_id: str) -> ProjectModel:
        project = self._projects.get_by_id(project_id)
        if project is None:
            raise NotFoundError(f"Project with ID '{project_id}' not found")
        return project

    def create_project(self, request: CreateProjectRequest, template_id: str | None = None) -> ProjectModel:
        """Create a project in planning status with its owner as first team member."""
        project_type = parse_enum(ProjectType, request.type, "project type")

        project = ProjectModel(
            id=request.id,
            name=request.name,
            description=request.description,
            owner=request.owner,
            type=project_type,
            status=ProjectStatus.PLANNING,
            tags=request.tags or [],
            settings=request.settings or ProjectSettings(),
            team_members=[
                ProjectTeamMember(name=request.owner, email=owner_email(request.owner), role=ProjectRole.OWNER)
            ],
        )
        if template_id:
            project = project.model_copy(
                update={"metadata": project.metadata.model_copy(update={"template": template_id})}
            )

        created = self._projects.create(project)
        logger.info("Created project %s for owner %s", created.id, created.owner)
        event_publisher.publish(
            ProjectCreated(aggregate_id=created.id, name=created.name, owner=created.owner, template=template_id)
        )
        return created

    def update_project(self, project_id: str, request: UpdateProjectRequest) -> ProjectModel:
        existing = self.require_project(project_id)

        changes = {
            key: getattr(request, key)
            for key in ("name", "description", "owner", "tags", "settings")
            if getattr(request, key) is not None
        }
        if request.status:
            changes["status"] = parse_enum(ProjectStatus, request.status, "project status")

        updated = self._projects.update(existing.model_copy(update=changes))
        logger.info("Updated project %s", project_id)
        return updated

    def delete_project(self, project_id: str) -> bool:
        deleted = self._projects.delete(project_id)
        if deleted:
            logger.info("Deleted project %s", project_id)
            event_publisher.publish(ProjectDeleted(aggregate_id=project_id))
        return deleted

    def exists(self, project_id: str) -> bool:
        return self._projects.exists(project_id)

    # Templates

    def get_templates(self) -> List[ProjectTemplate]:
        return list(PROJECT_TEMPLATES)

    def create_from_template(self, template_id: str, request: CreateProjectRequest) -> ProjectModel:
        """Create a project using the template's type, tags and default settings."""
        template = next((t for t in PROJECT_TEMPLATES if t.id == template_id), None)
        if template is None:
            raise NotFoundError(f"Template with ID '{template_id}' not found")

        tags = list(dict.fromkeys([*(request.tags or []), *template.default_tags]))
        templated = request.model_copy(
            update={
                "type": template.default_type.value,
                "tags": tags,
                "settings": request.settings or template.default_settings,
            }
        )
        return self.create_project(templated, template_id=template_id)

    # Membership

    def add_service(self, project_id: str, service_id: str) -> ProjectModel:
        if self._services.get_by_id(service_id) is None:
            raise NotFoundError(f"Service with ID '{service_id}' not found")
        return self._projects.add_service(project_id, service_id)

    def remove_service(self, project_id: str, service_id: str) -> ProjectModel:
        return self._projects.remove_service(project_id, service_id)

    def add_diagram(self, project_id: str, diagram_id: str) -> ProjectModel:
        if self._diagrams.get_by_id(diagram_id) is None:
            raise NotFoundError(f"Diagram with ID '{diagram_id}' not found")
        return self._projects.add_diagram(project_id, diagram_id)

    def remove_diagram(self, project_id: str, diagram_id: str) -> ProjectModel:
        return self._projects.remove_diagram(project_id, diagram_id)

    def add_pipeline(self, project_id: str, pipeline_id: str) -> ProjectModel:
        if self._pipelines.get_by_id(pipeline_id) is None:
            raise NotFoundError(f"Pipeline with ID '{pipeline_id}' not found")
        return self._projects.add_pipeline(project_id, pipeline_id)

    def remove_pipeline(self, project_id: str, pipeline_id: str) -> ProjectModel:
        return self._projects.remove_pipeline(project_id, pipeline_id)

    def add_team_member(self, project_id: str, request: AddTeamMemberRequest) -> ProjectModel:
        role = parse_enum(ProjectRole, request.role, "project role")
        member = ProjectTeamMember(name=request.name, email=request.email, role=role)
        return self._projects.add_team_member(project_id, member)

    def remove_team_member(self, project_id: str, member_email: str) -> ProjectModel:
        return self._projects.remove_team_member(project_id, member_email)
