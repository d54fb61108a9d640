from __future__ import annotations

from typing import List

from c4catalog.domain.entities import ProjectModel, ProjectTeamMember
from c4catalog.domain.enums import ProjectStatus, ProjectType
from c4catalog.domain.errors import ConflictError, NotFoundError
from c4catalog.domain.specifications import FieldEquals, FieldEqualsIgnoreCase, TextSearch
from c4catalog.repositories.base import JsonRepository


class ProjectRepository(JsonRepository[ProjectModel]):
    collection = "projects"
    model = ProjectModel
    label = "Project"

    def find_by_owner(self, owner: str) -> List[ProjectModel]:
        if not owner:
            return []
        return self.find(FieldEqualsIgnoreCase("owner", owner))

    def find_by_type(self, project_type: ProjectType) -> List[ProjectModel]:
        return self.find(FieldEquals("type", project_type))

    def find_by_status(self, status: ProjectStatus) -> List[ProjectModel]:
        return self.find(FieldEquals("status", status))

    def search(self, term: str) -> List[ProjectModel]:
        if not term:
            return self.get_all()
        return self.find(TextSearch(term, ("name", "description", "owner"), list_fields=("tags",)))

    # Member id lists (services, diagrams, pipelines)

    def add_service(self, project_id: str, service_id: str) -> ProjectModel:
        return self._add_reference(project_id, "services", service_id, "Service")

    def remove_service(self, project_id: str, service_id: str) -> ProjectModel:
        return self._remove_reference(project_id, "services", service_id, "Service")

    def add_diagram(self, project_id: str, diagram_id: str) -> ProjectModel:
        return self._add_reference(project_id, "diagrams", diagram_id, "Diagram")

    def remove_diagram(self, project_id: str, diagram_id: str) -> ProjectModel:
        return self._remove_reference(project_id, "diagrams", diagram_id, "Diagram")

    def add_pipeline(self, project_id: str, pipeline_id: str) -> ProjectModel:
        return self._add_reference(project_id, "pipelines", pipeline_id, "Pipeline")

    def remove_pipeline(self, project_id: str, pipeline_id: str) -> ProjectModel:
        return self._remove_reference(project_id, "pipelines", pipeline_id, "Pipeline")

    # Team

    def add_team_member(self, project_id: str, member: ProjectTeamMember) -> ProjectModel:
        project = self._require_existing(project_id)
        email = member.email.casefold()
        if any(m.email.casefold() == email for m in project.team_members):
            raise ConflictError(f"Team member with email '{member.email}' already exists in project")

        return self.update(project.model_copy(update={"team_members": [*project.team_members, member]}))

    def remove_team_member(self, project_id: str, member_email: str) -> ProjectModel:
        project = self._require_existing(project_id)
        email = member_email.casefold()
        members = [m for m in project.team_members if m.email.casefold() != email]
        if len(members) == len(project.team_members):
            raise NotFoundError(f"Team member with email '{member_email}' is not part of project")

        return self.update(project.model_copy(update={"team_members": members}))

    def _add_reference(self, project_id: str, field: str, ref_id: str, label: str) -> ProjectModel:
        project = self._require_existing(project_id)
        current: List[str] = getattr(project, field)
        if ref_id in current:
            raise ConflictError(f"{label} '{ref_id}' is already part of project")

        return self.update(project.model_copy(update={field: [*current, ref_id]}))

    def _remove_reference(self, project_id: str, field: str, ref_id: str, label: str) -> ProjectModel:
        project = self._require_existing(project_id)
        current: List[str] = getattr(project, field)
        remaining = [item for item in current if item != ref_id]
        if len(remaining) == len(current):
            raise NotFoundError(f"{label} '{ref_id}' is not part of project")

        return self.update(project.model_copy(update={field: remaining}))
