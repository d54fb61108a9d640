"""Event handlers for domain events."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from c4catalog.domain.events import (
        DiagramCreated,
        DiagramDeleted,
        ExecutionCancelled,
        ExecutionQueued,
        PipelineCreated,
        ProjectCreated,
        ProjectDeleted,
        ServiceCreated,
        ServiceDeleted,
    )

logger = logging.getLogger(__name__)


class AuditLogHandler:
    """Logs all domain events for audit trail."""

    def handle_service_created(self, event: ServiceCreated) -> None:
        logger.info(f"[AUDIT] Service registered: {event.aggregate_id} - {event.name} (owner {event.owner})")

    def handle_service_deleted(self, event: ServiceDeleted) -> None:
        logger.info(f"[AUDIT] Service removed: {event.aggregate_id}")

    def handle_diagram_created(self, event: DiagramCreated) -> None:
        logger.info(f"[AUDIT] Diagram created: {event.aggregate_id} - {event.name} ({event.diagram_type})")

    def handle_diagram_deleted(self, event: DiagramDeleted) -> None:
        logger.info(f"[AUDIT] Diagram deleted: {event.aggregate_id}")

    def handle_pipeline_created(self, event: PipelineCreated) -> None:
        logger.info(f"[AUDIT] Pipeline created: {event.aggregate_id} for service {event.service_id}")

    def handle_execution_queued(self, event: ExecutionQueued) -> None:
        logger.info(f"[AUDIT] Execution queued: {event.aggregate_id} (build {event.build_number})")

    def handle_execution_cancelled(self, event: ExecutionCancelled) -> None:
        logger.info(f"[AUDIT] Execution cancelled: {event.aggregate_id} of pipeline {event.pipeline_id}")

    def handle_project_created(self, event: ProjectCreated) -> None:
        suffix = f" from template {event.template}" if event.template else ""
        logger.info(f"[AUDIT] Project created: {event.aggregate_id} - {event.name}{suffix}")

    def handle_project_deleted(self, event: ProjectDeleted) -> None:
        logger.info(f"[AUDIT] Project deleted: {event.aggregate_id}")


def register_event_handlers():
    """Register all event handlers with the publisher."""
    from c4catalog.domain.events import (
        event_publisher,
        DiagramCreated,
        DiagramDeleted,
        ExecutionCancelled,
        ExecutionQueued,
        PipelineCreated,
        ProjectCreated,
        ProjectDeleted,
        ServiceCreated,
        ServiceDeleted,
    )

    audit = AuditLogHandler()

    event_publisher.subscribe(ServiceCreated, audit.handle_service_created)
    event_publisher.subscribe(ServiceDeleted, audit.handle_service_deleted)
    event_publisher.subscribe(DiagramCreated, audit.handle_diagram_created)
    event_publisher.subscribe(DiagramDeleted, audit.handle_diagram_deleted)
    event_publisher.subscribe(PipelineCreated, audit.handle_pipeline_created)
    event_publisher.subscribe(ExecutionQueued, audit.handle_execution_queued)
    event_publisher.subscribe(ExecutionCancelled, audit.handle_execution_cancelled)
    event_publisher.subscribe(ProjectCreated, audit.handle_project_created)
    event_publisher.subscribe(ProjectDeleted, audit.handle_project_deleted)
