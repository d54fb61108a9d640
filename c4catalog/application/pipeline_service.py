"""Pipeline definitions and execution records.

There is no execution engine: ``execute`` records a queued execution with
pending stage and step entries, and nothing advances it afterwards. The only
status change offered to callers is cancellation.
"""
from __future__ import annotations

import logging
import re
import uuid
from typing import List, Optional

from c4catalog.domain.entities import (
    ExecutionLogEntry,
    PipelineConfiguration,
    PipelineExecution,
    PipelineTriggers,
    StageExecution,
    StepExecution,
    utc_now,
)
from c4catalog.domain.enums import CANCELLABLE_STATUSES, ExecutionStatus, LogLevel, parse_enum
from c4catalog.domain.errors import NotFoundError, ValidationError
from c4catalog.domain.events import ExecutionCancelled, ExecutionQueued, PipelineCreated, event_publisher
from c4catalog.domain.specifications import FieldEquals, FieldEqualsIgnoreCase, MatchAll
from c4catalog.repositories import PipelineExecutionRepository, PipelineRepository
from c4catalog.schemas.api_schemas import (
    AddLogEntryRequest,
    CreatePipelineRequest,
    ExecutePipelineRequest,
    ExecutionSummary,
    PipelineSummary,
    UpdatePipelineRequest,
)

logger = logging.getLogger(__name__)


def slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def to_execution_summary(execution: PipelineExecution) -> ExecutionSummary:
    return ExecutionSummary(
        id=execution.id,
        status=execution.status.value,
        started_at=execution.started_at,
        duration=execution.duration,
        build_number=execution.build_number,
    )


class PipelineService:
    def __init__(self, pipelines: PipelineRepository, executions: PipelineExecutionRepository) -> None:
        self._pipelines = pipelines
        self._executions = executions

    # Pipelines

    def list_pipelines(self, service_id: Optional[str] = None) -> List[PipelineConfiguration]:
        if service_id:
            return self._pipelines.find_by_service_id(service_id)
        return self._pipelines.get_all()

    def list_summaries(self) -> List[PipelineSummary]:
        executions = self._executions.get_all()
        summaries = []
        for pipeline in self._pipelines.get_all():
            own = [e for e in executions if e.pipeline_id.casefold() == pipeline.id.casefold()]
            last = max(own, key=lambda e: e.build_number, default=None)
            summaries.append(
                PipelineSummary(
                    id=pipeline.id,
                    service_id=pipeline.service_id,
                    name=pipeline.name,
                    description=pipeline.description,
                    stage_count=len(pipeline.stages),
                    last_execution=to_execution_summary(last) if last else None,
                    updated_at=pipeline.metadata.updated_at,
                )
            )
        return summaries

    def get_pipeline(self, pipeline_id: str) -> Optional[PipelineConfiguration]:
        return self._pipelines.get_by_id(pipeline_id)

    def require_pipeline(self, pipeline_id: str) -> PipelineConfiguration:
        pipeline = self._pipelines.get_by_id(pipeline_id)
        if pipeline is None:
            raise NotFoundError(f"Pipeline with ID '{pipeline_id}' not found")
        return pipeline

    def create_pipeline(self, request: CreatePipelineRequest) -> PipelineConfiguration:
        pipeline_id = request.id or f"{request.service_id}-{slugify(request.name)}-{uuid.uuid4().hex[:8]}"
        pipeline = PipelineConfiguration(
            id=pipeline_id,
            service_id=request.service_id,
            name=request.name,
            description=request.description,
            stages=request.stages,
            triggers=request.triggers or PipelineTriggers(),
            environment=request.environment or {},
        )
        created = self._pipelines.create(pipeline)
        logger.info("Created pipeline %s for service %s", created.id, created.service_id)
        event_publisher.publish(
            PipelineCreated(aggregate_id=created.id, service_id=created.service_id, name=created.name)
        )
        return created

    def update_pipeline(self, pipeline_id: str, request: UpdatePipelineRequest) -> PipelineConfiguration:
        existing = self.require_pipeline(pipeline_id)
        changes = {
            key: getattr(request, key)
            for key in ("name", "description", "stages", "triggers", "environment")
            if getattr(request, key) is not None
        }
        updated = self._pipelines.update(existing.model_copy(update=changes))
        logger.info("Updated pipeline %s", pipeline_id)
        return updated

    def delete_pipeline(self, pipeline_id: str) -> bool:
        deleted = self._pipelines.delete(pipeline_id)
        if deleted:
            logger.info("Deleted pipeline %s", pipeline_id)
        return deleted

    # Executions

    def execute(self, pipeline_id: str, request: Optional[ExecutePipelineRequest] = None) -> PipelineExecution:
        """Record a queued execution of the pipeline's current stages."""
        pipeline = self.require_pipeline(pipeline_id)
        request = request or ExecutePipelineRequest()
        now = utc_now()

        previous = self._executions.find_by_pipeline_id(pipeline_id)
        build_number = max((e.build_number for e in previous), default=0) + 1

        execution = PipelineExecution(
            id=f"{pipeline_id}-{now:%Y%m%d-%H%M%S}-{uuid.uuid4().hex[:8]}",
            pipeline_id=pipeline_id,
            status=ExecutionStatus.QUEUED,
            started_at=now,
            triggered_by=request.triggered_by,
            build_number=build_number,
            parameters=request.parameters or {},
            stage_executions=[
                StageExecution(
                    stage_id=stage.id,
                    stage_name=stage.name,
                    status=ExecutionStatus.PENDING,
                    steps=[
                        StepExecution(step_id=step.id, step_name=step.name, status=ExecutionStatus.PENDING)
                        for step in stage.steps
                    ],
                )
                for stage in pipeline.stages
            ],
        )
        created = self._executions.create(execution)
        logger.info("Queued execution %s (build %d) of pipeline %s", created.id, build_number, pipeline_id)
        event_publisher.publish(
            ExecutionQueued(aggregate_id=created.id, pipeline_id=pipeline_id, build_number=build_number)
        )
        return created

    def list_executions(self, pipeline_id: Optional[str] = None, status: Optional[str] = None) -> List[PipelineExecution]:
        spec = MatchAll()
        if pipeline_id:
            spec = spec.and_(FieldEqualsIgnoreCase("pipeline_id", pipeline_id))
        if status:
            spec = spec.and_(FieldEquals("status", parse_enum(ExecutionStatus, status, "execution status")))
        return self._executions.find(spec)

    def get_execution(self, execution_id: str) -> Optional[PipelineExecution]:
        return self._executions.get_by_id(execution_id)

    def require_execution(self, execution_id: str) -> PipelineExecution:
        execution = self._executions.get_by_id(execution_id)
        if execution is None:
            raise NotFoundError(f"Execution with ID '{execution_id}' not found")
        return execution

    def cancel_execution(self, execution_id: str) -> PipelineExecution:
        """Mark a queued or running execution cancelled. No running work is interrupted."""
        execution = self.require_execution(execution_id)
        if execution.status not in CANCELLABLE_STATUSES:
            raise ValidationError("Can only cancel running or queued executions")

        completed_at = utc_now()
        duration = None
        if execution.started_at is not None:
            duration = int((completed_at - execution.started_at).total_seconds())

        cancelled = self._executions.update(
            execution.model_copy(
                update={
                    "status": ExecutionStatus.CANCELLED,
                    "completed_at": completed_at,
                    "duration": duration,
                }
            )
        )
        logger.info("Cancelled execution %s", execution_id)
        event_publisher.publish(ExecutionCancelled(aggregate_id=execution_id, pipeline_id=execution.pipeline_id))
        return cancelled

    def get_logs(self, execution_id: str, stage: Optional[str] = None) -> List[ExecutionLogEntry]:
        self.require_execution(execution_id)
        if stage:
            return self._executions.get_logs_by_stage(execution_id, stage)
        return self._executions.get_logs(execution_id)

    def add_log_entry(self, execution_id: str, request: AddLogEntryRequest) -> ExecutionLogEntry:
        entry = ExecutionLogEntry(
            level=parse_enum(LogLevel, request.level, "log level"),
            message=request.message,
            stage_id=request.stage_id,
            stage=request.stage,
        )
        self._executions.add_log_entry(execution_id, entry)
        return entry
