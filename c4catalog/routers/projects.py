from fastapi import APIRouter, Depends, Query, Response
from typing import List

from c4catalog.application.project_service import ProjectService
from c4catalog.dependencies import get_project_service
from c4catalog.domain.entities import ProjectModel, ProjectTemplate
from c4catalog.domain.errors import NotFoundError
from c4catalog.schemas.api_schemas import (
    AddTeamMemberRequest,
    CreateProjectRequest,
    ProjectSummary,
    UpdateProjectRequest,
)

router = APIRouter(prefix="/api/projects")


@router.get("", response_model=List[ProjectSummary])
def list_projects(projects: ProjectService = Depends(get_project_service)):
    """
    Retrieve summaries of all projects.
    """
    return projects.list_summaries()


@router.post("", response_model=ProjectModel, status_code=201)
def create_project(request: CreateProjectRequest, projects: ProjectService = Depends(get_project_service)):
    """
    Create a new project. The owner becomes its first team member.
    """
    return projects.create_project(request)


@router.get("/search", response_model=List[ProjectSummary])
def search_projects(q: str = Query(""), projects: ProjectService = Depends(get_project_service)):
    return projects.search(q)


@router.get("/templates", response_model=List[ProjectTemplate])
def get_templates(projects: ProjectService = Depends(get_project_service)):
    return projects.get_templates()


@router.post("/templates/{template_id}", response_model=ProjectModel, status_code=201)
def create_from_template(
    template_id: str,
    request: CreateProjectRequest,
    projects: ProjectService = Depends(get_project_service),
):
    """
    Create a project using a template's type, default tags and settings.
    """
    return projects.create_from_template(template_id, request)


@router.get("/{project_id}", response_model=ProjectModel)
def get_project(project_id: str, projects: ProjectService = Depends(get_project_service)):
    return projects.require_project(project_id)


@router.put("/{project_id}", response_model=ProjectModel)
def update_project(
    project_id: str,
    request: UpdateProjectRequest,
    projects: ProjectService = Depends(get_project_service),
):
    return projects.update_project(project_id, request)


@router.delete("/{project_id}", status_code=204)
def delete_project(project_id: str, projects: ProjectService = Depends(get_project_service)):
    if not projects.delete_project(project_id):
        raise NotFoundError(f"Project with ID '{project_id}' not found")
    return Response(status_code=204)


# Membership

@router.post("/{project_id}/services/{service_id}", response_model=ProjectModel)
def add_service(project_id: str, service_id: str, projects: ProjectService = Depends(get_project_service)):
    return projects.add_service(project_id, service_id)


@router.delete("/{project_id}/services/{service_id}", response_model=ProjectModel)
def remove_service(project_id: str, service_id: str, projects: ProjectService = Depends(get_project_service)):
    return projects.remove_service(project_id, service_id)


@router.post("/{project_id}/diagrams/{diagram_id}", response_model=ProjectModel)
def add_diagram(project_id: str, diagram_id: str, projects: ProjectService = Depends(get_project_service)):
    return projects.add_diagram(project_id, diagram_id)


@router.delete("/{project_id}/diagrams/{diagram_id}", response_model=ProjectModel)
def remove_diagram(project_id: str, diagram_id: str, projects: ProjectService = Depends(get_project_service)):
    return projects.remove_diagram(project_id, diagram_id)


@router.post("/{project_id}/pipelines/{pipeline_id}", response_model=ProjectModel)
def add_pipeline(project_id: str, pipeline_id: str, projects: ProjectService = Depends(get_project_service)):
    return projects.add_pipeline(project_id, pipeline_id)


@router.delete("/{project_id}/pipelines/{pipeline_id}", response_model=ProjectModel)
def remove_pipeline(project_id: str, pipeline_id: str, projects: ProjectService = Depends(get_project_service)):
    return projects.remove_pipeline(project_id, pipeline_id)


@router.post("/{project_id}/team", response_model=ProjectModel)
def add_team_member(
    project_id: str,
    request: AddTeamMemberRequest,
    projects: ProjectService = Depends(get_project_service),
):
    """
    Add a team member. Emails are unique within a project, ignoring case.
    """
    return projects.add_team_member(project_id, request)


@router.delete("/{project_id}/team/{email}", response_model=ProjectModel)
def remove_team_member(project_id: str, email: str, projects: ProjectService = Depends(get_project_service)):
    return projects.remove_team_member(project_id, email)
