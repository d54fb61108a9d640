"""
Test configuration and fixtures for c4catalog tests.
"""
import pytest
from fastapi.testclient import TestClient

from c4catalog.main import app
from c4catalog.dependencies import get_data_dir
from c4catalog.domain.events import event_publisher
from c4catalog.domain.entities import DiagramElement, DiagramModel, ServiceModel
from c4catalog.domain.enums import DiagramType, ElementType, ServiceType
from c4catalog.repositories import (
    DiagramRepository,
    PipelineExecutionRepository,
    PipelineRepository,
    ProjectRepository,
    ServiceRepository,
)


@pytest.fixture(autouse=True)
def clean_event_publisher():
    """Every test starts and ends without event subscribers."""
    event_publisher.clear_subscribers()
    yield
    event_publisher.clear_subscribers()


@pytest.fixture
def data_dir(tmp_path):
    """Temporary data root shared by the repositories and the API."""
    directory = tmp_path / "data"
    directory.mkdir()
    return directory


@pytest.fixture
def service_repo(data_dir):
    return ServiceRepository(data_dir)


@pytest.fixture
def diagram_repo(data_dir):
    return DiagramRepository(data_dir)


@pytest.fixture
def pipeline_repo(data_dir):
    return PipelineRepository(data_dir)


@pytest.fixture
def execution_repo(data_dir):
    return PipelineExecutionRepository(data_dir)


@pytest.fixture
def project_repo(data_dir):
    return ProjectRepository(data_dir)


@pytest.fixture
def client(data_dir):
    """Create test client backed by the temporary data directory."""
    app.dependency_overrides[get_data_dir] = lambda: str(data_dir)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_service(service_repo):
    """A registered service with no dependencies."""
    return service_repo.create(
        ServiceModel(id="svc-a", name="Service A", type=ServiceType.SERVICE, owner="Platform Team", system="billing")
    )


@pytest.fixture
def sample_diagram(diagram_repo):
    """A context diagram holding two elements and no relationships."""
    return diagram_repo.create(
        DiagramModel(
            id="d1",
            name="Context",
            type=DiagramType.CONTEXT,
            system="billing",
            elements=[
                DiagramElement(id="e1", type=ElementType.PERSON, name="Customer"),
                DiagramElement(id="e2", type=ElementType.SYSTEM, name="Billing"),
            ],
        )
    )
