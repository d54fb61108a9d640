"""Tests for application services."""
from __future__ import annotations

import re

import pytest
from unittest.mock import Mock

from c4catalog.application.diagram_service import DiagramService
from c4catalog.application.pipeline_service import PipelineService, slugify
from c4catalog.application.project_service import ProjectService, owner_email
from c4catalog.application.service_catalog_service import ServiceCatalogService
from c4catalog.domain.entities import (
    PipelineExecution,
    PipelineStage,
    PipelineStep,
    ServiceModel,
)
from c4catalog.domain.enums import (
    DiagramType,
    ElementType,
    ExecutionStatus,
    ProjectRole,
    ProjectStatus,
    ProjectType,
    ServiceLifecycle,
    ServiceType,
)
from c4catalog.domain.errors import ConflictError, NotFoundError, ValidationError
from c4catalog.domain.events import (
    ExecutionCancelled,
    ExecutionQueued,
    ProjectCreated,
    ServiceCreated,
    event_publisher,
)
from c4catalog.schemas.api_schemas import (
    AddLogEntryRequest,
    AddTeamMemberRequest,
    CreateDiagramRequest,
    CreatePipelineRequest,
    CreateProjectRequest,
    CreateServiceRequest,
    ExecutePipelineRequest,
    UpdateElementRequest,
    UpdateProjectRequest,
    UpdateServiceRequest,
)


class TestServiceCatalogService:
    """Test service registration and catalog queries."""

    @pytest.fixture
    def catalog(self, service_repo):
        return ServiceCatalogService(service_repo)

    def test_create_defaults_lifecycle_and_publishes(self, catalog):
        """Test lifecycle defaults to development and ServiceCreated is raised."""
        handler = Mock()
        event_publisher.subscribe(ServiceCreated, handler)

        service = catalog.create_service(
            CreateServiceRequest(id="svc-a", name="A", type="Service", owner="Platform")
        )

        assert service.lifecycle == ServiceLifecycle.DEVELOPMENT
        handler.assert_called_once()
        event = handler.call_args[0][0]
        assert event.aggregate_id == "svc-a"
        assert event.owner == "Platform"

    def test_create_rejects_unknown_type(self, catalog):
        with pytest.raises(ValidationError, match="Invalid service type"):
            catalog.create_service(CreateServiceRequest(id="svc-a", name="A", type="daemon", owner="x"))

    def test_update_merges_supplied_fields(self, catalog):
        catalog.create_service(
            CreateServiceRequest(id="svc-a", name="A", type="service", owner="Platform", tags=["core"])
        )

        updated = catalog.update_service("svc-a", UpdateServiceRequest(lifecycle="production"))

        assert updated.lifecycle == ServiceLifecycle.PRODUCTION
        assert updated.name == "A"
        assert updated.tags == ["core"]

    def test_api_fields_are_stored(self, catalog):
        service = catalog.create_service(CreateServiceRequest(
            id="svc-a", name="A", type="service", owner="Platform",
            api_spec="openapi.yaml", provides_apis=["billing-v1"], consumes_apis=["users-v2"],
        ))

        assert service.api_spec == "openapi.yaml"
        assert service.provides_apis == ["billing-v1"]
        assert service.consumes_apis == ["users-v2"]

    def test_update_changes_type_system_and_apis(self, catalog):
        catalog.create_service(CreateServiceRequest(id="svc-a", name="A", type="service", owner="Platform"))

        updated = catalog.update_service("svc-a", UpdateServiceRequest(
            type="WEBSITE", system="storefront", provides_apis=["shop-v1"], api_spec="shop.yaml",
        ))

        assert updated.type == ServiceType.WEBSITE
        assert updated.system == "storefront"
        assert updated.provides_apis == ["shop-v1"]
        assert updated.api_spec == "shop.yaml"
        assert updated.name == "A"

    def test_update_rejects_unknown_type(self, catalog):
        catalog.create_service(CreateServiceRequest(id="svc-a", name="A", type="service", owner="Platform"))

        with pytest.raises(ValidationError, match="Invalid service type: daemon"):
            catalog.update_service("svc-a", UpdateServiceRequest(type="daemon"))

        assert catalog.require_service("svc-a").type == ServiceType.SERVICE

    def test_update_missing_service(self, catalog):
        with pytest.raises(NotFoundError):
            catalog.update_service("ghost", UpdateServiceRequest(name="x"))

    def test_list_filters(self, catalog):
        catalog.create_service(CreateServiceRequest(
            id="a", name="A", type="service", owner="red", system="s1", lifecycle="production"))
        catalog.create_service(CreateServiceRequest(id="b", name="B", type="service", owner="Red", system="s2"))
        catalog.create_service(CreateServiceRequest(id="c", name="C", type="library", owner="blue", system="s1"))

        assert [s.id for s in catalog.list_services(team="RED", system="s1")] == ["a"]
        assert [s.id for s in catalog.list_services(lifecycle="development")] == ["b", "c"]
        with pytest.raises(ValidationError):
            catalog.list_services(lifecycle="sunset")

    def test_teams_and_dependencies(self, catalog):
        catalog.create_service(CreateServiceRequest(id="db", name="DB", type="service", owner="data"))
        catalog.create_service(CreateServiceRequest(
            id="api", name="API", type="service", owner="platform", depends_on=["db"]))
        catalog.create_service(CreateServiceRequest(
            id="web", name="Web", type="website", owner="platform", depends_on=["api"]))

        assert catalog.get_teams() == ["data", "platform"]

        deps = catalog.get_dependencies("api")
        assert [s.id for s in deps.dependencies] == ["db"]
        assert [s.id for s in deps.dependents] == ["web"]

    def test_search(self, catalog):
        catalog.create_service(CreateServiceRequest(
            id="a", name="Payments", type="service", owner="x", tags=["money"]))
        catalog.create_service(CreateServiceRequest(id="b", name="Search", type="service", owner="y"))

        assert [s.id for s in catalog.search_services("MONEY")] == ["a"]
        assert len(catalog.search_services("  ")) == 2


class TestDiagramService:
    """Test diagram orchestration."""

    @pytest.fixture
    def diagrams(self, diagram_repo, service_repo):
        return DiagramService(diagram_repo, service_repo)

    def test_create_generates_id(self, diagrams):
        diagram = diagrams.create_diagram(CreateDiagramRequest(name="Overview", type="Container", system="shop"))

        assert re.fullmatch(r"shop-container-[0-9a-f]{8}", diagram.id)
        assert diagram.type == DiagramType.CONTAINER

    def test_create_without_system_uses_placeholder(self, diagrams):
        diagram = diagrams.create_diagram(CreateDiagramRequest(name="Overview", type="context"))
        assert diagram.id.startswith("system-context-")

    def test_create_rejects_unknown_type(self, diagrams):
        with pytest.raises(ValidationError, match="Invalid diagram type"):
            diagrams.create_diagram(CreateDiagramRequest(id="d1", name="x", type="deployment"))

    def test_summaries(self, diagrams, sample_diagram):
        summaries = diagrams.list_summaries(diagram_type="context")

        assert len(summaries) == 1
        assert summaries[0].element_count == 2
        assert summaries[0].relationship_count == 0
        assert diagrams.list_summaries(system="other") == []

    def test_update_element_merges_fields(self, diagrams, sample_diagram):
        """Test partial element updates keep unspecified fields."""
        element = diagrams.update_element("d1", "e1", UpdateElementRequest(technology="Browser"))

        assert element.technology == "Browser"
        assert element.name == "Customer"
        assert element.type == ElementType.PERSON

    def test_update_missing_element(self, diagrams, sample_diagram):
        with pytest.raises(NotFoundError):
            diagrams.update_element("d1", "nope", UpdateElementRequest(name="x"))

    def test_generate_from_service(self, diagrams, service_repo):
        """Test generated diagram holds the service, its dependencies and the links."""
        service_repo.create(ServiceModel(id="db", name="Database"))
        service_repo.create(ServiceModel(id="api", name="API", system="shop", depends_on=["db", "unknown"]))

        diagram = diagrams.generate_from_service("api")

        assert [e.id for e in diagram.elements] == ["api", "db"]
        assert diagram.elements[1].type == ElementType.EXTERNAL_SYSTEM
        assert [(r.source_id, r.target_id) for r in diagram.relationships] == [("api", "db")]
        assert diagrams.get_diagram(diagram.id) is not None

    def test_generate_from_missing_service(self, diagrams):
        with pytest.raises(NotFoundError):
            diagrams.generate_from_service("ghost")


class TestPipelineService:
    """Test pipeline definitions and execution records."""

    @pytest.fixture
    def pipelines(self, pipeline_repo, execution_repo):
        return PipelineService(pipeline_repo, execution_repo)

    @pytest.fixture
    def pipeline(self, pipelines):
        return pipelines.create_pipeline(CreatePipelineRequest(
            id="svc-a-ci",
            service_id="svc-a",
            name="CI",
            stages=[
                PipelineStage(id="build", name="Build", steps=[PipelineStep(id="compile", name="Compile")]),
                PipelineStage(id="test", name="Test"),
            ],
        ))

    def test_slugify(self):
        assert slugify("Build & Deploy!") == "build-deploy"

    def test_create_generates_id(self, pipelines):
        pipeline = pipelines.create_pipeline(CreatePipelineRequest(service_id="svc-a", name="Nightly Build"))
        assert re.fullmatch(r"svc-a-nightly-build-[0-9a-f]{8}", pipeline.id)

    def test_execute_creates_queued_record(self, pipelines, pipeline):
        """Test execution starts queued with pending stage and step records."""
        handler = Mock()
        event_publisher.subscribe(ExecutionQueued, handler)

        execution = pipelines.execute("svc-a-ci", ExecutePipelineRequest(triggered_by="alice"))

        assert re.fullmatch(r"svc-a-ci-\d{8}-\d{6}-[0-9a-f]{8}", execution.id)
        assert execution.status == ExecutionStatus.QUEUED
        assert execution.triggered_by == "alice"
        assert execution.build_number == 1
        assert [s.stage_id for s in execution.stage_executions] == ["build", "test"]
        assert all(s.status == ExecutionStatus.PENDING for s in execution.stage_executions)
        assert execution.stage_executions[0].steps[0].step_id == "compile"
        handler.assert_called_once()

    def test_build_numbers_increase(self, pipelines, pipeline):
        first = pipelines.execute("svc-a-ci")
        second = pipelines.execute("svc-a-ci")
        assert (first.build_number, second.build_number) == (1, 2)

    def test_execute_missing_pipeline(self, pipelines):
        with pytest.raises(NotFoundError):
            pipelines.execute("ghost")

    def test_cancel_queued_execution(self, pipelines, pipeline):
        handler = Mock()
        event_publisher.subscribe(ExecutionCancelled, handler)
        execution = pipelines.execute("svc-a-ci")

        cancelled = pipelines.cancel_execution(execution.id)

        assert cancelled.status == ExecutionStatus.CANCELLED
        assert cancelled.completed_at is not None
        assert pipelines.get_execution(execution.id).status == ExecutionStatus.CANCELLED
        handler.assert_called_once()

    @pytest.mark.parametrize("status", [ExecutionStatus.SUCCESS, ExecutionStatus.FAILED, ExecutionStatus.CANCELLED])
    def test_cancel_finished_execution_rejected(self, pipelines, execution_repo, status):
        execution_repo.create(PipelineExecution(id="x1", pipeline_id="p", status=status))

        with pytest.raises(ValidationError, match="Can only cancel running or queued executions"):
            pipelines.cancel_execution("x1")

    def test_cancel_missing_execution(self, pipelines):
        with pytest.raises(NotFoundError):
            pipelines.cancel_execution("ghost")

    def test_list_executions_filters(self, pipelines, pipeline):
        execution = pipelines.execute("svc-a-ci")
        pipelines.execute("svc-a-ci")
        pipelines.cancel_execution(execution.id)

        assert len(pipelines.list_executions(pipeline_id="SVC-A-CI")) == 2
        assert [e.id for e in pipelines.list_executions(status="cancelled")] == [execution.id]
        with pytest.raises(ValidationError):
            pipelines.list_executions(status="exploded")

    def test_logs(self, pipelines, pipeline):
        execution = pipelines.execute("svc-a-ci")
        pipelines.add_log_entry(execution.id, AddLogEntryRequest(message="go", stage="Build"))
        pipelines.add_log_entry(execution.id, AddLogEntryRequest(message="check", stage="Test", level="warning"))

        assert [e.message for e in pipelines.get_logs(execution.id)] == ["go", "check"]
        assert [e.message for e in pipelines.get_logs(execution.id, stage="test")] == ["check"]
        with pytest.raises(NotFoundError):
            pipelines.get_logs("ghost")

    def test_summaries_report_latest_execution(self, pipelines, pipeline):
        pipelines.execute("svc-a-ci")
        latest = pipelines.execute("svc-a-ci")

        summary = pipelines.list_summaries()[0]
        assert summary.stage_count == 2
        assert summary.last_execution.id == latest.id


class TestProjectService:
    """Test project orchestration."""

    @pytest.fixture
    def projects(self, project_repo, service_repo, diagram_repo, pipeline_repo):
        return ProjectService(project_repo, service_repo, diagram_repo, pipeline_repo)

    def test_owner_email(self):
        assert owner_email("Jane Doe") == "jane.doe@company.com"

    def test_create_adds_owner_as_member(self, projects):
        handler = Mock()
        event_publisher.subscribe(ProjectCreated, handler)

        project = projects.create_project(CreateProjectRequest(id="p1", name="Shop", owner="Jane Doe"))

        assert project.status == ProjectStatus.PLANNING
        assert project.type == ProjectType.WEB_APPLICATION
        assert len(project.team_members) == 1
        owner = project.team_members[0]
        assert (owner.name, owner.email, owner.role) == ("Jane Doe", "jane.doe@company.com", ProjectRole.OWNER)
        handler.assert_called_once()

    def test_create_rejects_unknown_type(self, projects):
        with pytest.raises(ValidationError):
            projects.create_project(CreateProjectRequest(id="p1", name="x", owner="y", type="spaceship"))

    def test_create_duplicate_conflicts(self, projects):
        projects.create_project(CreateProjectRequest(id="p1", name="x", owner="y"))
        with pytest.raises(ConflictError):
            projects.create_project(CreateProjectRequest(id="p1", name="x", owner="y"))

    def test_update_parses_status_strictly(self, projects):
        projects.create_project(CreateProjectRequest(id="p1", name="x", owner="y"))

        assert projects.update_project("p1", UpdateProjectRequest(status="ACTIVE")).status == ProjectStatus.ACTIVE
        with pytest.raises(ValidationError):
            projects.update_project("p1", UpdateProjectRequest(status="paused"))

    def test_templates(self, projects):
        assert [t.id for t in projects.get_templates()] == [
            "web-app-template", "microservices-template", "data-platform-template",
        ]

    def test_create_from_template(self, projects):
        project = projects.create_from_template(
            "data-platform-template",
            CreateProjectRequest(id="p1", name="Lake", owner="Data Team", tags=["data", "lake"]),
        )

        assert project.type == ProjectType.DATA_PLATFORM
        assert project.tags == ["data", "lake", "analytics", "etl"]
        assert project.settings.is_public is False
        assert project.metadata.template == "data-platform-template"

    def test_create_from_unknown_template(self, projects):
        with pytest.raises(NotFoundError):
            projects.create_from_template("nope", CreateProjectRequest(id="p1", name="x", owner="y"))

    def test_add_service_requires_existing_service(self, projects, sample_service):
        projects.create_project(CreateProjectRequest(id="p1", name="x", owner="y"))

        assert projects.add_service("p1", "svc-a").services == ["svc-a"]
        with pytest.raises(NotFoundError):
            projects.add_service("p1", "ghost")

    def test_add_diagram_checks_diagram_before_project(self):
        """Test a missing diagram is reported without touching the project."""
        project_repo = Mock()
        diagram_repo = Mock()
        diagram_repo.get_by_id.return_value = None
        projects = ProjectService(project_repo, Mock(), diagram_repo, Mock())

        with pytest.raises(NotFoundError, match="Diagram"):
            projects.add_diagram("p1", "d-missing")
        project_repo.add_diagram.assert_not_called()

    def test_team_members(self, projects):
        projects.create_project(CreateProjectRequest(id="p1", name="x", owner="Jane Doe"))

        project = projects.add_team_member(
            "p1", AddTeamMemberRequest(name="Bob", email="bob@company.com", role="Maintainer")
        )
        assert project.team_members[-1].role == ProjectRole.MAINTAINER

        with pytest.raises(ValidationError):
            projects.add_team_member("p1", AddTeamMemberRequest(name="Eve", email="eve@x.com", role="boss"))

        assert len(projects.remove_team_member("p1", "bob@company.com").team_members) == 1

    def test_summaries_and_search(self, projects):
        projects.create_project(CreateProjectRequest(id="p1", name="Shop", owner="a", tags=["retail"]))
        projects.create_project(CreateProjectRequest(id="p2", name="Lake", owner="b"))

        assert [s.id for s in projects.list_summaries()] == ["p1", "p2"]
        assert projects.list_summaries()[0].team_member_count == 1
        assert [s.id for s in projects.search("retail")] == ["p1"]



class TestLookups:
    """Test direct lookups exposed by the services."""

    def test_catalog_lookups(self, service_repo):
        catalog = ServiceCatalogService(service_repo)
        catalog.create_service(CreateServiceRequest(id="a", name="A", type="library", owner="Red"))

        assert [s.id for s in catalog.get_services_by_owner("red")] == ["a"]
        assert [s.id for s in catalog.get_services_by_type("LIBRARY")] == ["a"]
        assert catalog.exists("a") is True
        assert catalog.exists("") is False
        with pytest.raises(ValidationError):
            catalog.get_services_by_type("plugin")

    def test_exists(self, project_repo, service_repo, diagram_repo, pipeline_repo, sample_diagram):
        projects = ProjectService(project_repo, service_repo, diagram_repo, pipeline_repo)
        projects.create_project(CreateProjectRequest(id="p1", name="x", owner="y", type="library"))

        assert projects.exists("p1")
        assert DiagramService(diagram_repo, service_repo).exists("d1")
        assert [p.id for p in project_repo.find_by_type(ProjectType.LIBRARY)] == ["p1"]
        assert [p.id for p in project_repo.find_by_status(ProjectStatus.PLANNING)] == ["p1"]
        assert [p.id for p in project_repo.find_by_owner("Y")] == ["p1"]
