from __future__ import annotations

from typing import List

from c4catalog.domain.entities import ExecutionLogEntry, PipelineExecution
from c4catalog.domain.enums import ExecutionStatus
from c4catalog.domain.specifications import FieldEquals, FieldEqualsIgnoreCase
from c4catalog.repositories.base import JsonRepository


class PipelineExecutionRepository(JsonRepository[PipelineExecution]):
    """Execution records. They track startedAt/completedAt instead of a metadata block."""

    collection = "pipeline-executions"
    model = PipelineExecution
    label = "Pipeline execution"

    def find_by_pipeline_id(self, pipeline_id: str) -> List[PipelineExecution]:
        if not pipeline_id:
            return []
        return self.find(FieldEqualsIgnoreCase("pipeline_id", pipeline_id))

    def find_by_status(self, status: ExecutionStatus) -> List[PipelineExecution]:
        return self.find(FieldEquals("status", status))

    def get_logs(self, execution_id: str) -> List[ExecutionLogEntry]:
        execution = self.get_by_id(execution_id)
        if execution is None:
            return []
        return list(execution.logs)

    def get_logs_by_stage(self, execution_id: str, stage_name: str) -> List[ExecutionLogEntry]:
        wanted = stage_name.casefold()
        return [
            entry for entry in self.get_logs(execution_id)
            if entry.stage is not None and entry.stage.casefold() == wanted
        ]

    def add_log_entry(self, execution_id: str, entry: ExecutionLogEntry) -> PipelineExecution:
        execution = self._require_existing(execution_id)
        return self.update(execution.model_copy(update={"logs": [*execution.logs, entry]}))

    def _stamp_created(self, entity: PipelineExecution) -> PipelineExecution:
        return entity

    def _stamp_updated(self, entity: PipelineExecution) -> PipelineExecution:
        return entity
