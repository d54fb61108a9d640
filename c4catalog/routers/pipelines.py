from fastapi import APIRouter, Depends, Response
from starlette.concurrency import run_in_threadpool
from typing import List, Optional

from c4catalog.application.pipeline_service import PipelineService
from c4catalog.dependencies import get_broadcast_channel, get_pipeline_service
from c4catalog.domain.entities import ExecutionLogEntry, PipelineConfiguration, PipelineExecution
from c4catalog.domain.errors import NotFoundError
from c4catalog.domain.ports import BroadcastChannel
from c4catalog.realtime.hub import execution_room
from c4catalog.schemas.api_schemas import (
    AddLogEntryRequest,
    CreatePipelineRequest,
    ExecutePipelineRequest,
    MessageResponse,
    PipelineSummary,
    UpdatePipelineRequest,
)

router = APIRouter(prefix="/api/pipelines")


@router.get("", response_model=List[PipelineConfiguration])
def list_pipelines(serviceId: Optional[str] = None, pipelines: PipelineService = Depends(get_pipeline_service)):
    """
    List pipeline definitions, optionally only those of one service.
    """
    return pipelines.list_pipelines(service_id=serviceId)


@router.get("/summaries", response_model=List[PipelineSummary])
def list_summaries(pipelines: PipelineService = Depends(get_pipeline_service)):
    """Pipeline summaries including the most recent execution of each."""
    return pipelines.list_summaries()


@router.post("", response_model=PipelineConfiguration, status_code=201)
def create_pipeline(request: CreatePipelineRequest, pipelines: PipelineService = Depends(get_pipeline_service)):
    return pipelines.create_pipeline(request)


# Executions

@router.get("/executions", response_model=List[PipelineExecution])
def list_executions(
    pipelineId: Optional[str] = None,
    status: Optional[str] = None,
    pipelines: PipelineService = Depends(get_pipeline_service),
):
    return pipelines.list_executions(pipeline_id=pipelineId, status=status)


@router.get("/executions/{execution_id}", response_model=PipelineExecution)
def get_execution(execution_id: str, pipelines: PipelineService = Depends(get_pipeline_service)):
    return pipelines.require_execution(execution_id)


@router.post("/executions/{execution_id}/cancel", response_model=MessageResponse)
async def cancel_execution(
    execution_id: str,
    pipelines: PipelineService = Depends(get_pipeline_service),
    channel: BroadcastChannel = Depends(get_broadcast_channel),
):
    """
    Cancel a queued or running execution and notify watchers of the execution.
    """
    cancelled = await run_in_threadpool(pipelines.cancel_execution, execution_id)
    await channel.broadcast(
        execution_room(execution_id),
        "ExecutionStatusChanged",
        {"executionId": cancelled.id, "status": cancelled.status.value},
    )
    return MessageResponse(message="Execution cancelled successfully")


@router.get("/executions/{execution_id}/logs", response_model=List[ExecutionLogEntry])
def get_execution_logs(
    execution_id: str,
    stage: Optional[str] = None,
    pipelines: PipelineService = Depends(get_pipeline_service),
):
    """
    Execution log, optionally only the entries of one stage.
    """
    return pipelines.get_logs(execution_id, stage=stage)


@router.post("/executions/{execution_id}/logs", response_model=ExecutionLogEntry, status_code=201)
async def add_execution_log(
    execution_id: str,
    request: AddLogEntryRequest,
    pipelines: PipelineService = Depends(get_pipeline_service),
    channel: BroadcastChannel = Depends(get_broadcast_channel),
):
    """
    Append a log entry to an execution and stream it to watchers of the execution.
    """
    entry = await run_in_threadpool(pipelines.add_log_entry, execution_id, request)
    await channel.broadcast(
        execution_room(execution_id),
        "LogEntry",
        {"executionId": execution_id, "stageId": entry.stage_id, "entry": entry.model_dump(mode="json", by_alias=True)},
    )
    return entry


# Pipelines by id

@router.get("/{pipeline_id}", response_model=PipelineConfiguration)
def get_pipeline(pipeline_id: str, pipelines: PipelineService = Depends(get_pipeline_service)):
    return pipelines.require_pipeline(pipeline_id)


@router.put("/{pipeline_id}", response_model=PipelineConfiguration)
def update_pipeline(
    pipeline_id: str,
    request: UpdatePipelineRequest,
    pipelines: PipelineService = Depends(get_pipeline_service),
):
    return pipelines.update_pipeline(pipeline_id, request)


@router.delete("/{pipeline_id}", status_code=204)
def delete_pipeline(pipeline_id: str, pipelines: PipelineService = Depends(get_pipeline_service)):
    if not pipelines.delete_pipeline(pipeline_id):
        raise NotFoundError(f"Pipeline with ID '{pipeline_id}' not found")
    return Response(status_code=204)


@router.post("/{pipeline_id}/executions", response_model=PipelineExecution, status_code=202)
def execute_pipeline(
    pipeline_id: str,
    request: Optional[ExecutePipelineRequest] = None,
    pipelines: PipelineService = Depends(get_pipeline_service),
):
    """
    Queue an execution of the pipeline. Nothing runs it; the record stays queued
    until cancelled.
    """
    return pipelines.execute(pipeline_id, request)
