from .services import ServiceRepository
from .diagrams import DiagramRepository
from .pipelines import PipelineRepository
from .executions import PipelineExecutionRepository
from .projects import ProjectRepository
